"""Workflow store: JSON-file persistence for workflow documents.

Each workflow lives in its own ``<id>.json`` file under the workflows
directory. Import/export uses the same document shape with a ``.gre`` suffix.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from greyflow.config import WORKFLOWS_DIR
from greyflow.errors import InvalidWorkflowDocument
from greyflow.models import WORKFLOW_FORMAT, WorkflowDocument

logger = logging.getLogger(__name__)

EXPORT_SUFFIX = ".gre"


def parse_document(data: dict) -> WorkflowDocument:
    """Validate an imported document. The format tag must be ``GreyFlow``."""
    if not isinstance(data, dict):
        raise InvalidWorkflowDocument("Workflow document must be a JSON object")
    if data.get("format") != WORKFLOW_FORMAT:
        raise InvalidWorkflowDocument(f"Not a {WORKFLOW_FORMAT} workflow (format={data.get('format')!r})")
    try:
        return WorkflowDocument.model_validate(data)
    except ValidationError as e:
        raise InvalidWorkflowDocument(f"Invalid workflow document: {e}") from e


def dump_document(doc: WorkflowDocument) -> dict:
    return doc.model_dump(mode="json", by_alias=True, exclude_none=True)


def export_filename(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower() + EXPORT_SUFFIX


def export_document(doc: WorkflowDocument, path: Path) -> Path:
    """Stamp ``exportedAt`` and write the document to ``path``."""
    doc.exported_at = datetime.now(timezone.utc).isoformat()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(dump_document(doc), indent=2), encoding="utf-8")
    logger.info(f"Exported workflow {doc.name} to {path}")
    return path


class WorkflowStore:
    """Persist and load ``WorkflowDocument`` objects as JSON files."""

    def __init__(self, storage_dir: Path | None = None):
        self._dir = storage_dir or WORKFLOWS_DIR
        self._dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"WorkflowStore initialized at {self._dir}")

    # -- CRUD --

    def save(self, doc: WorkflowDocument) -> WorkflowDocument:
        """Save (create or update) a workflow."""
        doc.touch()
        self._path_for(doc.id).write_text(json.dumps(dump_document(doc), indent=2), encoding="utf-8")
        logger.info(f"Workflow saved: {doc.name} ({doc.id})")
        return doc

    def load(self, workflow_id: str) -> WorkflowDocument | None:
        path = self._path_for(workflow_id)
        if not path.exists():
            return None
        try:
            return WorkflowDocument.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            logger.error(f"Failed to load workflow {workflow_id}: {e}")
            return None

    def delete(self, workflow_id: str) -> bool:
        path = self._path_for(workflow_id)
        if path.exists():
            path.unlink()
            logger.info(f"Workflow deleted: {workflow_id}")
            return True
        return False

    def exists(self, workflow_id: str) -> bool:
        return self._path_for(workflow_id).exists()

    def list_all(self) -> list[WorkflowDocument]:
        workflows: list[WorkflowDocument] = []
        for path in sorted(self._dir.glob("*.json")):
            try:
                workflows.append(WorkflowDocument.model_validate_json(path.read_text(encoding="utf-8")))
            except ValidationError as e:
                logger.warning(f"Skipping malformed workflow file {path.name}: {e}")
        return workflows

    # -- Import / export --

    def import_file(self, path: Path) -> WorkflowDocument:
        """Read a ``.gre``/``.json`` export and save it into the store."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except ValueError as e:
            raise InvalidWorkflowDocument(f"{path} is not valid JSON: {e}") from e
        doc = parse_document(data)
        logger.info(f"Imported workflow {doc.name} from {path}")
        return self.save(doc)

    def export_file(self, doc: WorkflowDocument, directory: Path) -> Path:
        """Write ``doc`` as ``<sanitised name>.gre`` into ``directory``."""
        return export_document(doc, directory / export_filename(doc.name))

    def _path_for(self, workflow_id: str) -> Path:
        safe_id = "".join(c for c in workflow_id if c.isalnum() or c in "-_")
        return self._dir / f"{safe_id}.json"
