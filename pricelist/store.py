"""
Template Store and Catalog Source

File-backed adapters for the two external collaborators of the pipeline:
templates are stored one JSON file per template, and the card catalog is
read from a JSON or CSV export.
"""

import csv
import json
import logging
import re
import uuid
from pathlib import Path
from typing import Dict, List, Union

from .matching import CatalogEntry
from .template import Template

logger = logging.getLogger(__name__)


# Ids become file names; keep them to a safe alphabet
_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class TemplateNotFoundError(LookupError):
    """Raised when a template id does not exist in the store."""


class TemplateStore:
    """
    Directory of templates, one <id>.json file each.

    Example:
        store = TemplateStore(Path("templates"))
        template_id = store.save_template(Template.create("Shop A", columns=4, rows=3))
        template = store.get_template(template_id)
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _path(self, template_id: str) -> Path:
        if not _SAFE_ID.match(template_id):
            raise TemplateNotFoundError(template_id)
        return self.root / f"{template_id}.json"

    def get_template(self, template_id: str) -> Template:
        """
        Load a template.

        Raises:
            TemplateNotFoundError: If no template has this id, or its file
                does not hold a template object
        """
        path = self._path(str(template_id))
        if not path.exists():
            raise TemplateNotFoundError(template_id)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.warning(f"Template file {path.name} is not a JSON object")
            raise TemplateNotFoundError(template_id)
        data["id"] = str(template_id)
        return Template.from_dict(data)

    def save_template(self, template: Template) -> str:
        """
        Create or overwrite a template.

        Templates without an id get a fresh one.

        Returns:
            The template id
        """
        template_id = template.id or uuid.uuid4().hex
        path = self._path(template_id)
        self.root.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(template.with_id(template_id).to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Template saved: {template.name} ({template_id})")
        return template_id

    def delete_template(self, template_id: str) -> None:
        """
        Delete a template.

        Raises:
            TemplateNotFoundError: If no template has this id
        """
        path = self._path(str(template_id))
        if not path.exists():
            raise TemplateNotFoundError(template_id)
        path.unlink()
        logger.info(f"Template deleted: {template_id}")

    def list_templates(self) -> List[Dict[str, str]]:
        """
        List stored templates.

        Returns:
            [{id, name}] sorted by name; unreadable files are skipped
        """
        if not self.root.exists():
            return []

        entries = []
        for path in sorted(self.root.glob("*.json")):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                entries.append({"id": path.stem, "name": str(data.get("name", ""))})
            except (json.JSONDecodeError, IOError, AttributeError) as e:
                logger.warning(f"Skipping unreadable template {path.name}: {e}")
        entries.sort(key=lambda e: (e["name"], e["id"]))
        return entries


class FileCatalogSource:
    """
    Card catalog exported to a file.

    JSON: a list of {"id", "name"} objects (extra keys ignored).
    CSV: a header row with at least "id" and "name" columns.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def list_cards(self) -> List[CatalogEntry]:
        """Read the whole catalog. Rows without an id or name are skipped."""
        if self.path.suffix.lower() == ".csv":
            rows = self._read_csv()
        else:
            rows = self._read_json()

        entries = []
        for row in rows:
            if not isinstance(row, dict) or row.get("id") in (None, "") or not row.get("name"):
                continue
            entries.append(CatalogEntry.coerce(row))

        logger.debug(f"Catalog loaded from {self.path}: {len(entries)} cards")
        return entries

    def _read_json(self) -> list:
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if isinstance(data, dict):
            # {"cards": [...]} exports
            data = data.get("cards", [])
        return data if isinstance(data, list) else []

    def _read_csv(self) -> list:
        with open(self.path, 'r', encoding='utf-8-sig', newline='') as f:
            return list(csv.DictReader(f))
