"""Field-name migration to the renderer's canonical vocabulary.

Legacy and alternate names are moved to their canonical name only when the
canonical field is absent; anything not in the mapping table is left as is.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from src.normalizer.schema import FieldType
from src.normalizer.text import split_bullets

logger = logging.getLogger(__name__)

# Renames applied to items of every section
COMMON_FIELD_MAP = {
    "date": "period",
    "url": "website",
    "summary": "description",
}

# Renames applied to items of one section, before the common ones
SECTION_FIELD_MAP = {
    "education": {
        "institution": "school",
        "studyType": "degree",
        "score": "grade",
    },
}

# Fields every item of a section must carry after migration
SECTION_REQUIRED_FIELDS: dict[str, dict[str, FieldType]] = {
    "education": {
        "school": FieldType.STRING,
        "degree": FieldType.STRING,
        "grade": FieldType.STRING,
        "location": FieldType.STRING,
        "period": FieldType.STRING,
        "website": FieldType.OBJECT,
        "description": FieldType.STRING,
    },
    "experience": {
        "period": FieldType.STRING,
        "website": FieldType.OBJECT,
        "description": FieldType.ARRAY,
    },
    "certifications": {
        "period": FieldType.STRING,
        "website": FieldType.OBJECT,
        "description": FieldType.STRING,
    },
    "skills": {
        "description": FieldType.STRING,
    },
}

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+(?=[A-Z])")


def relocate_legacy_nodes(data: dict) -> list[str]:
    """Move nodes that older templates keep in the wrong place.

    - ``sections.summary`` becomes ``data.summary`` (unless that has content)
    - ``basics.picture`` becomes ``data.picture``
    - ``basics.url`` becomes ``basics.website``

    Returns:
        Descriptions of the moves made.
    """
    moves: list[str] = []
    sections = data.get("sections")
    if isinstance(sections, dict) and isinstance(sections.get("summary"), dict):
        legacy = sections.pop("summary")
        current = data.get("summary")
        has_content = isinstance(current, dict) and str(current.get("content") or "").strip()
        if not has_content:
            data["summary"] = legacy
            moves.append("sections.summary -> summary")

    basics = data.get("basics")
    if isinstance(basics, dict):
        if "picture" in basics:
            picture = basics.pop("picture")
            if not isinstance(data.get("picture"), dict) and isinstance(picture, dict):
                data["picture"] = picture
                moves.append("basics.picture -> picture")
        if "url" in basics and "website" not in basics:
            basics["website"] = _website_from(basics.pop("url"))
            moves.append("basics.url -> basics.website")

    for move in moves:
        logger.debug(f"Relocated {move}")
    return moves


def migrate_item_fields(data: dict) -> int:
    """Rename item fields and fill per-section required fields.

    Args:
        data: The document's ``data`` subtree, modified in place.

    Returns:
        Number of fields renamed.
    """
    sections = data.get("sections")
    if not isinstance(sections, dict):
        return 0

    renamed = 0
    for key, section in sections.items():
        if not isinstance(section, dict) or not isinstance(section.get("items"), list):
            continue
        for item in section["items"]:
            if isinstance(item, dict):
                renamed += migrate_item(key, item)

    if renamed:
        logger.info(f"Migrated {renamed} legacy field names")
    return renamed


def migrate_item(section_key: str, item: dict) -> int:
    """Migrate one item in place and return the number of renamed fields."""
    renamed = 0
    mapping = {**SECTION_FIELD_MAP.get(section_key, {}), **COMMON_FIELD_MAP}
    for legacy, canonical in mapping.items():
        if legacy not in item or canonical in item:
            continue
        value = item.pop(legacy)
        if canonical == "website":
            value = _website_from(value)
        elif canonical == "description":
            value = _description_from(section_key, value, from_summary=True)
        elif canonical == "period" and not isinstance(value, str):
            value = "" if value is None else str(value)
        item[canonical] = value
        renamed += 1

    if isinstance(item.get("website"), dict):
        item["website"] = _website_from(item["website"])

    for field, field_type in SECTION_REQUIRED_FIELDS.get(section_key, {}).items():
        value = item.get(field)
        if field == "description":
            item[field] = _description_from(section_key, value)
        elif field == "website":
            item[field] = _website_from(value)
        elif not field_type.matches(value):
            item[field] = _coerce(value, field_type)

    return renamed


def _website_from(value: Any) -> dict:
    if isinstance(value, dict):
        url = value.get("url")
        if not isinstance(url, str):
            url = value.get("href") if isinstance(value.get("href"), str) else ""
        label = value.get("label") if isinstance(value.get("label"), str) else ""
        extra = {k: v for k, v in value.items() if k not in {"url", "href", "label"}}
        return {**extra, "label": label, "url": url}
    if isinstance(value, str):
        return {"label": "", "url": value.strip()}
    return {"label": "", "url": ""}


def _description_from(section_key: str, value: Any, from_summary: bool = False) -> Any:
    if section_key == "experience":
        if isinstance(value, list):
            return value
        if value is None:
            return []
        text = str(value).strip()
        if not text:
            return []
        bullets = split_bullets(text)
        if len(bullets) > 1 or not from_summary:
            return bullets or [text]
        pieces = [p.strip() for p in _SENTENCE_SPLIT.split(text) if p.strip()]
        return pieces or [text]

    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(str(v) for v in value if v is not None)
    return "" if value is None else str(value)


def _coerce(value: Any, field_type: FieldType) -> Any:
    if value is None:
        return field_type.empty()
    if field_type is FieldType.STRING and isinstance(value, (int, float, bool)):
        return str(value)
    return field_type.empty()
