"""
Coordinate template persistence for Banner Edit.

A template is a named CoordinateSet: the four field regions drawn on a
reference banner together with that banner's size. All templates live as a
single JSON document under one key of a KeyValueStore.

Template record schema:
- name
- areas: {campaign|discount|regularPrice|hardPrice: {x, y, width, height} | null}
- imageWidth, imageHeight
- createdAt, updatedAt (ISO timestamps)

Classes:
    CoordinateTemplate: A stored template
    TemplateManager: Save, load, delete, list, export and import templates
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from BE_Libs.ImageEditingLib.image_models import CoordinateSet
from BE_Libs.TemplateStoreLib.key_value_store import KeyValueStore
from BE_Libs.constants import (
    FIELD_AREAS,
    FIELD_CREATED_AT,
    FIELD_IMAGE_HEIGHT,
    FIELD_IMAGE_WIDTH,
    FIELD_NAME,
    FIELD_UPDATED_AT,
    TEMPLATE_STORAGE_KEY,
)
from BE_Libs.errors import TemplateImportError

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now().isoformat(timespec="seconds")


@dataclass
class CoordinateTemplate(CoordinateSet):
    name: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            FIELD_NAME: self.name,
            FIELD_AREAS: self.areas_to_dict(),
            FIELD_IMAGE_WIDTH: self.image_width,
            FIELD_IMAGE_HEIGHT: self.image_height,
            FIELD_CREATED_AT: self.created_at,
            FIELD_UPDATED_AT: self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoordinateTemplate":
        """
        Build a template from its stored record.

        Raises:
            ValueError: If required keys are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Template record must be an object, got {type(data).__name__}")
        areas = data.get(FIELD_AREAS)
        if not isinstance(areas, dict):
            raise ValueError("Template record has no 'areas' object")
        try:
            image_width = int(data[FIELD_IMAGE_WIDTH])
            image_height = int(data[FIELD_IMAGE_HEIGHT])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Template record has invalid image size: {e}")

        return cls(
            image_width=image_width,
            image_height=image_height,
            areas=areas,
            name=str(data.get(FIELD_NAME, "")),
            created_at=data.get(FIELD_CREATED_AT),
            updated_at=data.get(FIELD_UPDATED_AT),
        )


class TemplateManager:
    """
    Named coordinate templates kept in a KeyValueStore.

    Args:
        store: Backing key-value store
        storage_key: Key holding the JSON document of all templates
    """

    def __init__(self, store: KeyValueStore, storage_key: str = TEMPLATE_STORAGE_KEY):
        self.store = store
        self.storage_key = storage_key

    def _load_records(self) -> Dict[str, Dict[str, Any]]:
        raw = self.store.get(self.storage_key)
        if not raw:
            return {}
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load templates: {e}")
            return {}
        if not isinstance(records, dict):
            logger.error("Stored templates are not a JSON object, ignoring them")
            return {}
        return records

    def _save_records(self, records: Dict[str, Dict[str, Any]]) -> None:
        self.store.set(self.storage_key, json.dumps(records, ensure_ascii=False))

    def save_template(self, name: str, coordinates: CoordinateSet, overwrite: bool = True) -> bool:
        """
        Save coordinates under a name.

        Args:
            name: Template name
            coordinates: Areas and reference image size
            overwrite: Replace an existing template of the same name

        Returns:
            True if saved, False if the name exists and overwrite is off

        Raises:
            ValueError: If the name is empty or coordinates are missing
        """
        name = (name or "").strip()
        if not name or coordinates is None:
            raise ValueError("Template name and coordinates are required")

        records = self._load_records()
        existing = records.get(name)
        if existing is not None and not overwrite:
            logger.info(f"Template '{name}' already exists, not overwriting")
            return False

        now = _timestamp()
        created_at = existing.get(FIELD_CREATED_AT) if isinstance(existing, dict) else None
        template = CoordinateTemplate(
            image_width=coordinates.image_width,
            image_height=coordinates.image_height,
            areas=dict(coordinates.areas),
            name=name,
            created_at=created_at or now,
            updated_at=now,
        )
        records[name] = template.to_dict()
        self._save_records(records)
        logger.info(f"Saved template '{name}'")
        return True

    def get_template(self, name: str) -> Optional[CoordinateTemplate]:
        record = self._load_records().get(name)
        if record is None:
            return None
        try:
            return CoordinateTemplate.from_dict(record)
        except ValueError as e:
            logger.error(f"Template '{name}' is corrupt: {e}")
            return None

    def delete_template(self, name: str) -> bool:
        records = self._load_records()
        if name not in records:
            return False
        del records[name]
        self._save_records(records)
        logger.info(f"Deleted template '{name}'")
        return True

    def list_templates(self) -> List[CoordinateTemplate]:
        """All readable templates, most recently updated first."""
        templates = []
        for name in self._load_records():
            template = self.get_template(name)
            if template is not None:
                templates.append(template)
        return sorted(templates, key=lambda t: t.updated_at or "", reverse=True)

    def export_templates(self) -> str:
        return json.dumps(self._load_records(), indent=2, ensure_ascii=False)

    def import_templates(self, json_text: str) -> int:
        """
        Merge templates from an exported JSON document.

        Imported templates replace stored ones with the same name.

        Returns:
            Number of templates imported

        Raises:
            TemplateImportError: If the document or any record is malformed;
                nothing is imported in that case
        """
        try:
            imported = json.loads(json_text)
        except (TypeError, json.JSONDecodeError) as e:
            raise TemplateImportError(f"Template file is not valid JSON: {e}")
        if not isinstance(imported, dict):
            raise TemplateImportError("Template file must contain a JSON object of templates")

        normalized: Dict[str, Dict[str, Any]] = {}
        for name, record in imported.items():
            try:
                template = CoordinateTemplate.from_dict(record)
            except ValueError as e:
                raise TemplateImportError(f"Template '{name}' is invalid: {e}")
            template.name = str(name)
            normalized[str(name)] = template.to_dict()

        records = self._load_records()
        records.update(normalized)
        self._save_records(records)
        logger.info(f"Imported {len(normalized)} template(s)")
        return len(normalized)
