"""Validation-error parsing and field repair.

The rendering service reports schema violations as
``{"issues": [{"path": [...], "expected": ..., "code": ..., "message": ...}]}``
(sometimes wrapped in ``{"data": ...}``). Each issue becomes a RepairPatch;
patches are applied by structured path navigation, creating intermediate
lists or objects as the next path segment requires.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from pydantic import ValidationError

from src.normalizer.document import WorkingDocument, ensure_parent, normalize_path
from src.normalizer.layout import LEVEL_TYPES
from src.normalizer.schema import DEFAULT_FONT, DEFAULT_THEME, FieldType
from src.normalizer.text import join_bullets
from src.renderer.models import RepairPatch

logger = logging.getLogger(__name__)

_LEVEL = {"icon": "circle", "type": "circle"}
_FONT = {"fontFamily": DEFAULT_FONT}

# Defaults for objects the renderer requires, keyed by field name
OBJECT_DEFAULTS: dict[str, dict] = {
    "website": {"label": "", "url": ""},
    "url": {"label": "", "href": ""},
    "effects": {"hidden": False, "border": False, "grayscale": False},
    "layout": {"pages": []},
    "css": {"enabled": False, "value": ""},
    "design": {"level": _LEVEL, "colors": DEFAULT_THEME},
    "typography": {"body": _FONT, "heading": _FONT},
    "level": _LEVEL,
    "colors": DEFAULT_THEME,
    "body": _FONT,
    "heading": _FONT,
    "page": {"gapX": 0, "gapY": 0, "marginX": 0, "marginY": 0},
}

UNTITLED = "Untitled"


def parse_validation_errors(body: str | bytes | dict | None) -> list[RepairPatch]:
    """Turn a validation-error body into repair patches.

    Issues without a path, and issues of a kind that cannot be repaired by a
    default value, are skipped. An unparseable body yields no patches.

    Args:
        body: Raw response body or decoded JSON.

    Returns:
        One RepairPatch per repairable issue, in body order.
    """
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except ValueError:
            logger.warning("Validation error body is not JSON")
            return []
    if not isinstance(body, dict):
        return []

    issues = body.get("issues")
    if not isinstance(issues, list) and isinstance(body.get("data"), dict):
        issues = body["data"].get("issues")
    if not isinstance(issues, list):
        return []

    patches: list[RepairPatch] = []
    for issue in issues:
        patch = _patch_from_issue(issue)
        if patch is not None:
            patches.append(patch)
    return patches


def _patch_from_issue(issue: Any) -> RepairPatch | None:
    if not isinstance(issue, dict):
        return None
    path = issue.get("path")
    if not isinstance(path, list) or not path:
        return None

    code = issue.get("code") or "invalid_type"
    fields: dict[str, Any] = {"path": path, "message": issue.get("message") or ""}
    if issue.get("expected"):
        fields.update(expected_type=str(issue["expected"]), error_code=code)
    elif code == "too_small" and issue.get("origin") == "string":
        fields.update(
            expected_type="string",
            error_code="too_small",
            minimum=issue.get("minimum") or 1,
        )
    elif code == "invalid_value" and issue.get("values"):
        fields.update(
            expected_type="enum",
            error_code="invalid_value",
            allowed_values=list(issue["values"]),
        )
    else:
        return None

    try:
        return RepairPatch(**fields)
    except ValidationError as e:
        logger.debug(f"Skipping malformed validation issue {issue!r}: {e}")
        return None


def apply_repair_patches(root: dict, patches: list[RepairPatch]) -> int:
    """Apply patches to a document tree in place.

    Args:
        root: Document tree (the submission payload).
        patches: Patches from parse_validation_errors.

    Returns:
        Number of patches that changed the tree.
    """
    applied = 0
    for patch in patches:
        if _apply_patch(root, patch):
            applied += 1
            logger.debug(f"Repaired {patch.dotted_path} ({patch.error_code})")
        else:
            logger.warning(f"Could not repair {patch.dotted_path} ({patch.error_code})")
    logger.info(f"Applied {applied}/{len(patches)} repair patches")
    return applied


def _apply_patch(root: dict, patch: RepairPatch) -> bool:
    path = normalize_path(patch.path)
    parent = ensure_parent(root, path)
    if parent is None:
        return False
    leaf = path[-1]
    default = type_default(leaf, patch.expected_type)

    if isinstance(leaf, int):
        if not isinstance(parent, list):
            return False
        while len(parent) <= leaf:
            parent.append(copy.deepcopy(default))
        if parent[leaf] is None:
            parent[leaf] = default
        return True

    if not isinstance(parent, dict):
        return False

    current = parent.get(leaf)
    before = copy.deepcopy(current)

    if patch.expected_type == FieldType.OBJECT.value and isinstance(current, dict):
        _merge_missing(current, default)

    if path[-3:-1] == ("design", "level"):
        _repair_level(parent, leaf)
    elif path[-3:-1] == ("design", "colors") and not current:
        parent[leaf] = DEFAULT_THEME.get(leaf, "#000000")
    elif len(path) >= 3 and path[-3] == "typography" and leaf == "fontFamily" and not current:
        parent[leaf] = DEFAULT_FONT

    current = parent.get(leaf)
    if patch.error_code == "too_small" and patch.expected_type == FieldType.STRING.value:
        if leaf == "title":
            parent[leaf] = _sibling_name(parent) or UNTITLED
        elif not isinstance(current, str) or len(current.strip()) < (patch.minimum or 1):
            parent[leaf] = UNTITLED if leaf == "name" else (default or UNTITLED)
    elif patch.error_code == "invalid_value" and patch.allowed_values:
        if leaf == "type" and "design" in path and "level" in path:
            parent[leaf] = "circle"
        else:
            parent[leaf] = patch.allowed_values[0]
    elif current is None:
        if leaf == "title" and _sibling_name(parent):
            parent[leaf] = _sibling_name(parent)
        else:
            parent[leaf] = default
    elif patch.expected_type == FieldType.STRING.value and current == "":
        if leaf == "title":
            parent[leaf] = _sibling_name(parent) or UNTITLED
        elif leaf == "name":
            parent[leaf] = UNTITLED
    else:
        parent[leaf] = _coerce(current, patch.expected_type, default)

    return parent.get(leaf) != before


def type_default(field_name: str | int, expected_type: str) -> Any:
    """Default value for a field of the expected type."""
    if expected_type == FieldType.OBJECT.value and isinstance(field_name, str):
        return copy.deepcopy(OBJECT_DEFAULTS.get(field_name, {}))
    try:
        return FieldType(expected_type).empty()
    except ValueError:
        return ""


def _merge_missing(target: dict, defaults: dict) -> None:
    for key, value in defaults.items():
        if target.get(key) is None:
            target[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(target[key], dict):
            for deep_key, deep_value in value.items():
                if target[key].get(deep_key) is None:
                    target[key][deep_key] = copy.deepcopy(deep_value)


def _repair_level(level: dict, leaf: str) -> None:
    if leaf == "icon" and not level.get("icon"):
        level["icon"] = "circle"
    elif leaf == "type" and level.get("type") not in LEVEL_TYPES:
        level["type"] = "circle"


def _sibling_name(node: dict) -> str | None:
    name = node.get("name")
    if isinstance(name, str) and name.strip():
        return name
    return None


def _coerce(value: Any, expected_type: str, default: Any) -> Any:
    try:
        field_type = FieldType(expected_type)
    except ValueError:
        return value
    if field_type.matches(value):
        return value
    if field_type is FieldType.STRING:
        return "" if value is None else str(value)
    if field_type is FieldType.BOOLEAN:
        return bool(value)
    return default


def build_payload(document: WorkingDocument) -> dict:
    """Submission payload: a private copy with experience bullets joined.

    The renderer takes experience descriptions as one string; bullets are
    separated by blank lines.
    """
    payload = document.to_payload()
    experience = (payload.get("data", {}).get("sections") or {}).get("experience")
    if isinstance(experience, dict):
        for item in experience.get("items") or []:
            if isinstance(item, dict) and isinstance(item.get("description"), list):
                item["description"] = join_bullets(str(b) for b in item["description"])
    return payload
