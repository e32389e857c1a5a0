"""Whitespace and paragraph normalization.

Two modes exist. Verbatim mode only collapses whitespace and newlines.
Reflow mode also strips leading bullet glyphs and re-joins hyphenated words,
which is unsafe for text that must be copied unmodified; protected-verbatim
fields therefore refuse reflow outright.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Iterable
from typing import Any

from src.normalizer.document import DocPath, PathSegment, normalize_path

BULLET_GLYPHS = ("•", "*")

_NEWLINES = re.compile(r"\n+")
_INLINE_SPACE = re.compile(r"[ \t\u00a0]+")
_LEADING_BULLET = re.compile(r"^\s*[•*]\s+(?=\w)")
_LEADING_GLYPH = re.compile(r"^\s*[•*]\s*")
_TRAILING_GLYPH = re.compile(r"\s*[•*]\s*$")
_BROKEN_HYPHEN = re.compile(r"(\w)-\s+(\w)")
_SPACED_HYPHEN = re.compile(r"\b(\w+)\s*-\s*(\w+)\b")
_GLYPH_SPLIT = re.compile(r"(?=[•*])")
_SHORT_PART = 10


class ProtectedFieldError(RuntimeError):
    """Raised when reflow is requested on a protected-verbatim field."""

    def __init__(self, path: DocPath):
        super().__init__(f"Field {'.'.join(map(str, path))} is protected-verbatim")
        self.path = path


def normalize_verbatim(text: Any) -> str:
    """Collapse newlines and runs of spaces; nothing else changes."""
    if text is None:
        return ""
    value = str(text).replace("\r\n", "\n").replace("\r", "\n")
    value = _NEWLINES.sub(" ", value)
    value = _INLINE_SPACE.sub(" ", value)
    return value.strip()


def reflow_paragraph(text: Any) -> str:
    """Reflow a free-form paragraph into one clean line.

    Strips a leading bullet glyph, re-joins words split across a hyphenated
    line break, and joins short hyphenated compounds written with spaces.
    """
    if text is None:
        return ""
    value = str(text).replace("\r\n", "\n").replace("\r", "\n")
    value = _NEWLINES.sub(" ", value)
    value = _LEADING_BULLET.sub("", value)
    value = _BROKEN_HYPHEN.sub(r"\1-\2", value)

    def join_short(match: re.Match[str]) -> str:
        left, right = match.group(1), match.group(2)
        if len(left) <= _SHORT_PART and len(right) <= _SHORT_PART:
            return f"{left}-{right}"
        return match.group(0)

    value = _SPACED_HYPHEN.sub(join_short, value)
    return re.sub(r"\s+", " ", value).strip()


def clean_bullet(text: Any) -> str:
    """Strip bullet glyphs at either end and collapse whitespace.

    Hyphens are left alone.
    """
    value = normalize_verbatim(text)
    value = _LEADING_GLYPH.sub("", value)
    value = _TRAILING_GLYPH.sub("", value)
    return value.strip()


def split_bullets(value: Any) -> list[str]:
    """Turn a description (list or text) into clean bullet strings."""
    if value is None:
        return []
    if isinstance(value, list):
        pieces = [str(v) for v in value if v is not None]
    else:
        text = str(value).replace("\r\n", "\n").strip()
        pieces = _NEWLINES.split(text)
        if len(pieces) == 1:
            pieces = _GLYPH_SPLIT.split(text)
    bullets = [clean_bullet(piece) for piece in pieces]
    return [b for b in bullets if b]


def join_bullets(bullets: Iterable[str]) -> str:
    """Join bullets into one description string separated by blank lines."""
    return "\n\n".join(b for b in bullets if b)


class TextNormalizer:
    """Applies the right normalization mode per field path."""

    def __init__(self, protected: Collection[DocPath] = ()):
        """Initialize the normalizer.

        Args:
            protected: Protected-verbatim field paths.
        """
        self.protected = {normalize_path(p) for p in protected}

    def is_protected(self, path: Iterable[PathSegment]) -> bool:
        return normalize_path(path) in self.protected

    def reflow(self, text: Any, path: Iterable[PathSegment]) -> str:
        """Reflow a non-protected field.

        Raises:
            ProtectedFieldError: If the field is protected-verbatim.
        """
        key = normalize_path(path)
        if key in self.protected:
            raise ProtectedFieldError(key)
        return reflow_paragraph(text)

    def normalize_field(self, text: Any, path: Iterable[PathSegment]) -> str:
        """Verbatim mode for protected fields, reflow for the rest."""
        if self.is_protected(path):
            return normalize_verbatim(text)
        return self.reflow(text, path)

    def normalize_data(self, data: dict) -> None:
        """Normalize the summary and every section item in place.

        Experience descriptions are bullet lists (cleaned one by one); other
        item descriptions are reflowed paragraphs; all other item strings
        are stripped.
        """
        summary = data.get("summary")
        if isinstance(summary, dict) and isinstance(summary.get("content"), str):
            summary["content"] = self.normalize_field(
                summary["content"], ("data", "summary", "content")
            )

        sections = data.get("sections")
        if not isinstance(sections, dict):
            return
        for key, section in sections.items():
            if not isinstance(section, dict) or not isinstance(section.get("items"), list):
                continue
            for index, item in enumerate(section["items"]):
                if isinstance(item, dict):
                    self._normalize_item(item, ("data", "sections", key, "items", index), key)

    def _normalize_item(self, item: dict, path: DocPath, section_key: str) -> None:
        for field, value in list(item.items()):
            field_path = path + (field,)
            if field == "description":
                if section_key == "experience":
                    if self.is_protected(field_path):
                        raw = value if isinstance(value, list) else [value]
                        item[field] = [normalize_verbatim(v) for v in raw if v]
                    else:
                        item[field] = split_bullets(value)
                elif isinstance(value, str):
                    item[field] = self.normalize_field(value, field_path)
            elif isinstance(value, str):
                item[field] = (
                    normalize_verbatim(value)
                    if self.is_protected(field_path)
                    else value.strip()
                )
