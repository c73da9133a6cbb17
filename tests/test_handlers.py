"""Test node handlers and the handler registry."""

import httpx
import pytest

from conftest import FakeProvider
from greyflow.api_client import ApiClient
from greyflow.errors import ApiCallError, UnknownNodeTypeError
from greyflow.handlers import HandlerRegistry, HandlerRequest, create_default_registry
from greyflow.handlers.api import ApiHandler
from greyflow.handlers.basic import DEFAULT_INPUT_PROMPT, InputHandler, OutputHandler
from greyflow.handlers.document import DocumentHandler
from greyflow.handlers.processor import ProcessorHandler
from greyflow.models import NodeKind, WorkflowNode


def request_for(node: dict, value: str = "", history=None) -> HandlerRequest:
    return HandlerRequest(node=WorkflowNode.model_validate(node), input=value, history=history or [])


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_default_registry_covers_every_kind(tmp_path):
    registry = create_default_registry(provider_factory=lambda m, e: FakeProvider(), output_dir=tmp_path)
    assert sorted(registry.kinds()) == sorted(k.value for k in NodeKind)
    assert isinstance(registry.get("processor"), ProcessorHandler)
    assert isinstance(registry.get(NodeKind.PDF), DocumentHandler)


def test_register_rejects_unknown_kind():
    with pytest.raises(ValueError):
        HandlerRegistry().register("video", OutputHandler())


@pytest.mark.asyncio
async def test_dispatch_unknown_kind():
    with pytest.raises(UnknownNodeTypeError) as exc:
        await HandlerRegistry().dispatch("video", request_for({"id": "v1", "type": "video"}))
    assert exc.value.node_id == "v1"
    assert exc.value.node_type == "video"


@pytest.mark.asyncio
async def test_dispatch_reraises_handler_errors():
    registry = HandlerRegistry()
    registry.register(NodeKind.API, ApiHandler(ApiClient(client=httpx.AsyncClient())))

    with pytest.raises(ApiCallError, match="API endpoint is required"):
        await registry.dispatch(NodeKind.API, request_for({"id": "a1", "type": "api"}, "x"))


# ---------------------------------------------------------------------------
# Input / output
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_input_passes_value_through():
    result = await InputHandler().execute(request_for({"id": "in1", "type": "input"}, "hello"))
    assert result.is_complete
    assert result.content == "hello"


@pytest.mark.asyncio
async def test_input_blank_asks_with_node_prompt():
    result = await InputHandler().execute(request_for({"id": "in1", "type": "input", "prompt": "City?"}, "   "))
    assert result.needs_input
    assert result.input_prompt == "City?"

    result = await InputHandler().execute(request_for({"id": "in1", "type": "input"}, ""))
    assert result.input_prompt == DEFAULT_INPUT_PROMPT


@pytest.mark.asyncio
async def test_output_is_identity():
    result = await OutputHandler().execute(request_for({"id": "o1", "type": "output"}, "final"))
    assert result.content == "final"


# ---------------------------------------------------------------------------
# Processor
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_processor_passes_model_and_endpoint_to_factory():
    seen = []
    provider = FakeProvider("plain reply")

    def factory(model, endpoint):
        seen.append((model, endpoint))
        return provider

    node = {"id": "p1", "type": "processor", "model": "gpt-4o", "apiEndpoint": "https://chat.test"}
    result = await ProcessorHandler(factory).execute(request_for(node, "hi"))

    assert result.content == "plain reply"
    assert seen == [("gpt-4o", "https://chat.test")]
    assert provider.closed == 1


@pytest.mark.asyncio
async def test_processor_missing_info():
    provider = FakeProvider("MISSING_INFO: your phone?")
    result = await ProcessorHandler(lambda m, e: provider).execute(request_for({"id": "p1"}, "hi"))

    assert result.needs_more_info
    assert result.info_request == "your phone?"
    assert result.content == "MISSING_INFO: your phone?"


@pytest.mark.asyncio
async def test_processor_sends_history_before_input():
    provider = FakeProvider("COMPLETE: ok")
    history = [{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}]

    await ProcessorHandler(lambda m, e: provider).execute(request_for({"id": "p1"}, "c", history))

    assert [m["content"] for m in provider.calls[0]["messages"]] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_processor_closes_provider_on_failure():
    provider = FakeProvider(RuntimeError("down"))
    with pytest.raises(RuntimeError):
        await ProcessorHandler(lambda m, e: provider).execute(request_for({"id": "p1"}, "c"))
    assert provider.closed == 1


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_api_handler_calls_endpoint():
    def handler(request):
        return httpx.Response(200, json=[{"title": "Headline", "description": "Body"}])

    api = ApiHandler(ApiClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler))))
    node = {
        "id": "a1",
        "type": "api",
        "apiEndpoint": "https://news.test",
        "apiConfig": {"queryParams": {"q": "{{input}}"}},
    }

    result = await api.execute(request_for(node, "python"))
    assert result.content == "Headline\nBody"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_pdf_handler_writes_file(tmp_path):
    handler = DocumentHandler(NodeKind.PDF, output_dir=tmp_path)
    node = {"id": "d1", "type": "pdf", "pdfConfig": {"documentType": "cv", "filename": "my cv"}}

    result = await handler.execute(request_for(node, "# Jane Doe\n\n## Experience\n- Built things"))

    assert result.content == "PDF document generated: my cv.pdf"
    assert (tmp_path / "my cv.pdf").read_bytes().startswith(b"%PDF")


@pytest.mark.asyncio
async def test_word_handler_uses_provider_structure(tmp_path):
    provider = FakeProvider('{"sections": [{"type": "title", "content": "Report"}]}')
    handler = DocumentHandler(NodeKind.WORD, provider_factory=lambda m, e: provider, output_dir=tmp_path)

    result = await handler.execute(request_for({"id": "w1", "type": "word"}, "anything"))

    assert result.content == "Word document generated: general_document.docx"
    assert (tmp_path / "general_document.docx").exists()
    assert provider.closed == 1


def test_document_handler_rejects_other_kinds():
    with pytest.raises(ValueError):
        DocumentHandler(NodeKind.OUTPUT)
