"""Configuration loading and defaults.

Reads from config.toml at the project root, with environment variable overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from dotenv import load_dotenv

# Look for .env in the package's parent directory (project root)
_project_root = Path(__file__).resolve().parent.parent
load_dotenv(_project_root / ".env")
load_dotenv()  # also check cwd

# ---------------------------------------------------------------------------
# Load config.toml
# ---------------------------------------------------------------------------

_toml_path = Path(os.getenv("GREYFLOW_CONFIG", str(_project_root / "config.toml")))
_cfg: dict = {}
if _toml_path.exists():
    with open(_toml_path, "rb") as f:
        _cfg = tomllib.load(f)

_engine = _cfg.get("engine", {})
_processor = _cfg.get("processor", {})
_api = _cfg.get("api", {})
_documents = _cfg.get("documents", {})
_store = _cfg.get("store", {})
_server = _cfg.get("server", {})

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

MAX_INTERACTIVE_RETRIES = int(os.getenv("GREYFLOW_MAX_RETRIES", _engine.get("max_interactive_retries", 10)))
PASS_FACTOR = int(os.getenv("GREYFLOW_PASS_FACTOR", _engine.get("pass_factor", 5)))
STATUS_DELAY = float(os.getenv("GREYFLOW_STATUS_DELAY", _engine.get("status_delay", 0.0)))

# ---------------------------------------------------------------------------
# Provider API keys (env-only, never in toml)
# ---------------------------------------------------------------------------

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

# ---------------------------------------------------------------------------
# Processor (text generation)
# ---------------------------------------------------------------------------

DEFAULT_ENDPOINT = os.getenv(
    "GREYFLOW_DEFAULT_ENDPOINT", _processor.get("default_endpoint", "https://grey-api.vercel.app/api/chat")
)
DEFAULT_MODEL = os.getenv("GREYFLOW_DEFAULT_MODEL", _processor.get("default_model", "gpt-4o"))
PROCESSOR_TIMEOUT = float(os.getenv("GREYFLOW_PROCESSOR_TIMEOUT", _processor.get("request_timeout", 120)))
DEFAULT_TEMPERATURE = float(os.getenv("GREYFLOW_TEMPERATURE", _processor.get("temperature", 0.7)))
DEFAULT_MAX_TOKENS = int(os.getenv("GREYFLOW_MAX_TOKENS", _processor.get("max_tokens", 4096)))

# ---------------------------------------------------------------------------
# API agents
# ---------------------------------------------------------------------------

API_TIMEOUT = float(os.getenv("GREYFLOW_API_TIMEOUT", _api.get("request_timeout", 60)))
CORS_PROXY_URL = os.getenv("GREYFLOW_CORS_PROXY", _api.get("cors_proxy", "https://api.allorigins.win/raw?url={url}"))

# ---------------------------------------------------------------------------
# Documents / storage
# ---------------------------------------------------------------------------

OUTPUT_DIR = Path(os.getenv("GREYFLOW_OUTPUT_DIR", _documents.get("output_dir", str(Path.cwd() / "output"))))
STRUCTURE_WITH_LLM = os.getenv("GREYFLOW_STRUCTURE_WITH_LLM", str(_documents.get("structure_with_llm", False))).lower() in ("1", "true", "yes")
WORKFLOWS_DIR = Path(os.getenv("GREYFLOW_WORKFLOWS_DIR", _store.get("workflows_dir", str(Path.cwd() / "workflows"))))

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

SERVER_HOST = os.getenv("GREYFLOW_HOST", _server.get("host", "0.0.0.0"))
SERVER_PORT = int(os.getenv("GREYFLOW_PORT", _server.get("port", 8000)))
