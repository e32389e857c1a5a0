"""Template loading.

A template is the schema-shaped document skeleton a WorkingDocument is
seeded from. It is validated before anything else runs.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from src.normalizer.document import WorkingDocument

logger = logging.getLogger(__name__)

_DATA_KEYS = {"basics", "sections", "summary", "metadata", "picture"}


class TemplateError(ValueError):
    """Raised when a template cannot seed a document."""


def parse_template(source: str | bytes | Path | Mapping[str, Any]) -> dict:
    """Parse a template into a fresh dict.

    Args:
        source: JSON text or bytes, a mapping, or a path to a .json, .yaml
            or .yml file.

    Returns:
        A deep copy of the template wrapped as ``{"data": ...}`` when it
        only carries the data subtree.

    Raises:
        TemplateError: If the template is unreadable, malformed, or not an
            object.
    """
    if isinstance(source, Path):
        raw = _read_file(source)
    elif isinstance(source, Mapping):
        raw = copy.deepcopy(dict(source))
    else:
        try:
            text = source.decode("utf-8") if isinstance(source, bytes) else source
        except UnicodeDecodeError as e:
            raise TemplateError(f"Template is not valid UTF-8: {e}") from e
        if not text or not text.strip():
            raise TemplateError("Template is empty")
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise TemplateError(f"Template is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise TemplateError(
            f"Template must be a JSON object, got {type(raw).__name__}"
        )

    if "data" not in raw and _DATA_KEYS & set(raw):
        logger.debug("Wrapping data-only template")
        raw = {"data": raw}
    if "data" in raw and not isinstance(raw["data"], dict):
        raise TemplateError("Template 'data' must be an object")
    raw.setdefault("data", {})
    return raw


def load_template(source: str | bytes | Path | Mapping[str, Any]) -> WorkingDocument:
    """Parse a template and seed a new WorkingDocument from it."""
    return WorkingDocument(parse_template(source))


def _read_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateError(f"Cannot read template {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise TemplateError(f"Template {path} is not valid UTF-8: {e}") from e

    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TemplateError(f"Template {path} is malformed: {e}") from e
