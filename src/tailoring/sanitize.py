"""Post-generation cleanup for text produced by the text-generation service."""

from __future__ import annotations

import re

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
URL_RE = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
PHONE_RE = re.compile(r"(?<!\w)\+?\(?\d[\d\s().-]{7,}\d(?!\w)")

SIGN_OFFS = (
    "sincerely",
    "regards",
    "best regards",
    "kind regards",
    "warm regards",
    "best",
    "respectfully",
    "thank you",
    "thanks",
)

_SIGN_OFF_LINE = re.compile(
    r"^\s*(?:%s)\s*[,.!]?\s*$" % "|".join(re.escape(s) for s in SIGN_OFFS),
    re.IGNORECASE,
)
_LABEL_PREFIX = re.compile(
    r"^\s*(?:professional\s+)?(?:summary|profile)\s*:\s*", re.IGNORECASE
)
_MARKDOWN = re.compile(r"\*\*|__|^#+\s*", re.MULTILINE)
_LINE_BULLET = re.compile(r"^\s*[-•*]\s+")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,.;:!?])")
_EMPTY_PARENS = re.compile(r"\(\s*[,;|/]*\s*\)")
_STRAY_SEPARATORS = re.compile(r"(?:\s*[|/]\s*){2,}")


def _drop_phone(match: re.Match[str]) -> str:
    # Year ranges such as "2015 - 2020" are not phone numbers
    digits = sum(ch.isdigit() for ch in match.group(0))
    return "" if digits >= 9 else match.group(0)


def sanitize_generated_text(text: str | None, candidate_name: str | None = None) -> str:
    """Strip PII and letter furniture from generated prose.

    Removes emails, URLs and phone-like tokens, a leading "Summary:" label,
    markdown emphasis, a line that is just the candidate's name, and a
    sign-off line together with everything after it.

    Args:
        text: Raw generated text.
        candidate_name: Name of the candidate, if known.

    Returns:
        Cleaned text with one entry per non-empty line, or "" if nothing is left.
    """
    if not text:
        return ""

    value = text.replace("\r\n", "\n").replace("\r", "\n")
    value = EMAIL_RE.sub("", value)
    value = URL_RE.sub("", value)
    value = PHONE_RE.sub(_drop_phone, value)
    value = _MARKDOWN.sub("", value)

    name = (candidate_name or "").strip().lower()
    lines: list[str] = []
    for raw in value.split("\n"):
        if _SIGN_OFF_LINE.match(raw):
            break
        line = _LINE_BULLET.sub("", raw)
        line = _EMPTY_PARENS.sub("", line)
        line = _STRAY_SEPARATORS.sub(" ", line)
        line = _SPACE_BEFORE_PUNCT.sub(r"\1", line)
        line = re.sub(r"\s+", " ", line).strip(" ,;|")
        if not line:
            continue
        if name and line.lower().rstrip(".") == name:
            continue
        lines.append(line)

    if lines:
        lines[0] = _LABEL_PREFIX.sub("", lines[0])
    return "\n".join(line for line in lines if line)
