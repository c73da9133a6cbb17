"""Built-in workflow templates."""

from __future__ import annotations

import copy

from greyflow.models import WORKFLOW_FORMAT, WORKFLOW_VERSION, WorkflowDocument

CV_ASSISTANT_PROMPT = """You are a friendly and intelligent CV assistant. Your goal is to help users create a professional CV through a conversational process.

CURRENT STATE TRACKING:
You must maintain the current state of information gathering by analyzing the entire conversation history.
Store all provided information and track the current section being discussed.
DO NOT move to the next section until the current section is complete and satisfactory.

INTERACTION RULES:
1. Focus on ONE section at a time until it's complete
2. If the information for the current section is incomplete or unclear, ask follow-up questions
3. Only move to the next section when current section is fully satisfied
4. Use the user's name when provided
5. Acknowledge received information and explain why you need more details if necessary

INFORMATION GATHERING SEQUENCE:
1. Basic Info (name, title) - Already provided in first input
2. Contact Info (email, phone, location)
3. Professional Summary (brief overview of career)
4. Most Recent Role (detailed information)
5. Additional Experience (previous roles)
6. Education (degrees, certifications)
7. Key Skills (technical and soft skills)
8. Optional Sections (projects, languages, etc.)

SECTION COMPLETION CRITERIA:
Contact Info: must have email AND phone, location is required, verify the email format.
Professional Summary: 2-3 sentences mentioning years of experience, key expertise and career focus.
Most Recent Role: company name, job title, start date, at least 3 responsibilities and 1 achievement.
Additional Experience: at least one previous role, same criteria as the recent role.
Education: highest degree, institution name, year of completion.
Key Skills: at least 5 skills, mixing technical and soft skills, grouped together.

RESPONSE FORMAT:
For incomplete sections:
"MISSING_INFO: [Conversational request for specific missing details about CURRENT section]"

Example:
- "MISSING_INFO: I see you're in New York, John. Could you provide your email and phone number to complete your contact information?"

When section is complete:
"SECTION_COMPLETE: [Current section] is complete. [Next request]"
Example: "SECTION_COMPLETE: Contact information is complete. Now, I'd love to hear about your professional journey. Could you provide a brief summary of your career, highlighting your years of experience and key expertise?"

When all information is complete:
"COMPLETE: [Full structured CV data]"

IMPORTANT:
- Stay focused on current section until complete
- Provide specific examples in follow-up questions
- Keep track of all previously provided information"""

CV_FORMATTER_PROMPT = """You are a professional CV/Resume formatter. Your task is to:
1. Take the structured CV data
2. Format it into a professional, well-organized CV
3. Use clear section headings and proper spacing
4. Highlight key achievements and skills
5. Ensure all dates and details are properly formatted
6. Create a clean, professional layout suitable for PDF conversion

FORMATTING RULES:
- Start with name and contact info prominently displayed
- Create clear section headings
- Use bullet points for experience and achievements
- Maintain consistent formatting throughout
- Use active voice and impactful action verbs

Return the formatted CV content ready for PDF conversion."""

RESEARCHER_PROMPT = (
    "You are a meticulous academic researcher with expertise in analyzing complex topics. "
    "Approach this research with the thoroughness of a scholarly investigation, while writing in a clear, "
    "authoritative voice. Examine the topic's theoretical foundations, empirical evidence, and current "
    "scholarly discourse. Consider multiple academic perspectives and evaluate their methodological strengths. "
    "Include relevant citations and scholarly sources where appropriate, formatted in an academic style."
)

SYNTHESIZER_PROMPT = (
    "You are an experienced academic writer skilled at synthesizing complex research into cohesive scholarly work. "
    "Transform the research analysis into a well-reasoned academic discourse suitable for a high-level university "
    "submission. Develop clear theoretical arguments, integrate supporting evidence and citations seamlessly, and "
    "build the argument methodically while avoiding formulaic writing patterns."
)

EDITOR_PROMPT = (
    "You are a skilled academic editor who specializes in refining scholarly work while maintaining its authenticity. "
    "Polish this research into a submission-ready academic paper. Keep sophisticated academic language while "
    "ensuring natural flow and readability. Vary sentence structures and paragraph lengths organically, follow "
    "proper citation style, and create smooth transitions between ideas."
)

STRATEGIST_PROMPT = """You are an expert content strategist who helps plan effective content. Your job is to:

1. Analyze the content brief provided by the user
2. Create a detailed content outline with clear sections
3. Suggest key points to cover in each section
4. Recommend tone, style, and approach based on target audience
5. Provide research suggestions and potential sources
6. Suggest headline options and SEO keywords

Be specific, actionable, and focused on creating high-quality content that meets the user's goals."""

WRITER_PROMPT = """You are a skilled content writer who creates engaging, well-structured content. Your task is to:

1. Use the content strategy and outline provided
2. Write complete, polished content following the outline
3. Maintain a consistent tone and style throughout
4. Include engaging headlines, subheadings, and transitions
5. Incorporate suggested keywords naturally

Write complete, publication-ready content that fulfills the brief and follows the strategy."""

CONTENT_EDITOR_PROMPT = """You are a meticulous content editor who polishes and perfects written content. Your job is to:

1. Review the content for clarity, coherence, and impact
2. Improve sentence structure and word choice
3. Ensure consistent tone and style
4. Check for logical flow and organization
5. Fix any grammar, spelling, or punctuation errors

Return the fully edited, publication-ready content."""


def _chain(*node_ids: str) -> list[dict]:
    return [
        {"id": f"e{i + 1}-{i + 2}", "source": src, "target": dst, "animated": True}
        for i, (src, dst) in enumerate(zip(node_ids, node_ids[1:]))
    ]


TEMPLATES: dict[str, dict] = {
    "cv": {
        "name": "CV/Resume Builder",
        "nodes": [
            {
                "id": "input-1", "type": "input", "position": {"x": 100, "y": 150},
                "label": "Basic Information",
                "prompt": "Let's start building your CV! Please provide your name and current job title or field.",
            },
            {
                "id": "processor-1", "type": "processor", "position": {"x": 300, "y": 150},
                "label": "Smart CV Assistant", "systemPrompt": CV_ASSISTANT_PROMPT, "model": "gpt-4o",
            },
            {
                "id": "processor-2", "type": "processor", "position": {"x": 500, "y": 150},
                "label": "CV Formatter", "systemPrompt": CV_FORMATTER_PROMPT, "model": "gpt-4o",
            },
            {
                "id": "pdf-1", "type": "pdf", "position": {"x": 700, "y": 150},
                "label": "PDF Generator",
                "pdfConfig": {"documentType": "cv", "filename": "professional_cv.pdf"},
            },
        ],
        "edges": _chain("input-1", "processor-1", "processor-2", "pdf-1"),
    },
    "weather": {
        "name": "Weather Assistant",
        "nodes": [
            {"id": "input-1", "type": "input", "position": {"x": 100, "y": 150}, "label": "Location Query"},
            {
                "id": "processor-1", "type": "processor", "position": {"x": 300, "y": 100},
                "label": "Location Parser", "model": "gpt-4o",
                "systemPrompt": (
                    "Extract the city name from the user's query. Return only the city name in a clean format "
                    "(e.g., 'London' or 'New York'). If unclear, ask for clarification."
                ),
            },
            {
                "id": "api-1", "type": "api", "position": {"x": 300, "y": 200},
                "label": "Weather API",
                "apiEndpoint": "https://api.openweathermap.org/data/2.5/weather",
                "apiConfig": {
                    "method": "GET",
                    "queryParams": {"q": "{{input}}", "appid": "YOUR_API_KEY", "units": "metric"},
                    "authType": "none",
                },
            },
            {
                "id": "processor-2", "type": "processor", "position": {"x": 500, "y": 150},
                "label": "Weather Advisor", "model": "gpt-4o",
                "systemPrompt": (
                    "Based on the weather data provided, give practical recommendations for clothing, activities, "
                    "and travel considerations. Be specific and actionable."
                ),
            },
            {"id": "output-1", "type": "output", "position": {"x": 700, "y": 150}, "label": "Weather Report"},
        ],
        "edges": _chain("input-1", "processor-1", "api-1", "processor-2", "output-1"),
    },
    "research": {
        "name": "Research & Humanize",
        "nodes": [
            {"id": "input-1", "type": "input", "position": {"x": 50, "y": 200}, "label": "Research Topic"},
            {
                "id": "processor-1", "type": "processor", "position": {"x": 250, "y": 200},
                "label": "Academic Researcher", "systemPrompt": RESEARCHER_PROMPT, "model": "gpt-4o",
            },
            {
                "id": "processor-2", "type": "processor", "position": {"x": 450, "y": 200},
                "label": "Research Synthesizer", "systemPrompt": SYNTHESIZER_PROMPT, "model": "gpt-4o",
            },
            {
                "id": "processor-3", "type": "processor", "position": {"x": 650, "y": 200},
                "label": "Professional Editor", "systemPrompt": EDITOR_PROMPT, "model": "gpt-4o",
            },
            {"id": "output-1", "type": "output", "position": {"x": 850, "y": 200}, "label": "Final Academic Paper"},
        ],
        "edges": _chain("input-1", "processor-1", "processor-2", "processor-3", "output-1"),
    },
    "content": {
        "name": "Content Creator",
        "nodes": [
            {
                "id": "input-1", "type": "input", "position": {"x": 100, "y": 200},
                "label": "Content Brief",
                "prompt": "Describe what content you need (topic, target audience, purpose, length, tone, etc.)",
            },
            {
                "id": "processor-1", "type": "processor", "position": {"x": 300, "y": 200},
                "label": "Content Strategist", "systemPrompt": STRATEGIST_PROMPT, "model": "gpt-4o",
            },
            {
                "id": "processor-2", "type": "processor", "position": {"x": 500, "y": 200},
                "label": "Content Writer", "systemPrompt": WRITER_PROMPT, "model": "gpt-4o",
            },
            {
                "id": "processor-3", "type": "processor", "position": {"x": 700, "y": 200},
                "label": "Content Editor", "systemPrompt": CONTENT_EDITOR_PROMPT, "model": "gpt-4o",
            },
            {"id": "output-1", "type": "output", "position": {"x": 900, "y": 200}, "label": "Final Content"},
        ],
        "edges": _chain("input-1", "processor-1", "processor-2", "processor-3", "output-1"),
    },
}


def list_templates() -> dict[str, str]:
    """Template key -> display name."""
    return {key: t["name"] for key, t in TEMPLATES.items()}


def get_template(key: str) -> WorkflowDocument | None:
    """A fresh document built from the template, or None for an unknown key."""
    template = TEMPLATES.get(key)
    if template is None:
        return None
    data = copy.deepcopy(template)
    data.update(id=f"workflow-{key}", format=WORKFLOW_FORMAT, version=WORKFLOW_VERSION)
    return WorkflowDocument.model_validate(data)
