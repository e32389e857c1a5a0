"""Section placement, page policy and sidebar constraints."""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.normalizer.config import NormalizerConfig

logger = logging.getLogger(__name__)

# Fixed order of main-column sections; other content sections follow
CANONICAL_MAIN_ORDER = ("summary", "experience", "education", "certifications")
SIDEBAR_SECTIONS = ("skills",)

LEVEL_TYPES = (
    "hidden",
    "circle",
    "square",
    "rectangle",
    "rectangle-full",
    "progress-bar",
    "icon",
)

CSS_PATCH_START = "/* RR_PATCH_START */"
CSS_PATCH_END = "/* RR_PATCH_END */"
CSS_PATCH_BODY = """\
.page { overflow: visible; }
.section, .section-item { break-inside: auto; }
.section-item { break-inside: avoid-page; }
.section-item ul { margin: 0; padding-left: 1rem; }"""

_PATCH_BLOCK = re.compile(
    re.escape(CSS_PATCH_START) + r".*?" + re.escape(CSS_PATCH_END), re.DOTALL
)


def section_has_content(data: dict, key: str) -> bool:
    """Whether a section (or the summary) would render anything."""
    if key == "summary":
        summary = data.get("summary")
        return (
            isinstance(summary, dict)
            and isinstance(summary.get("content"), str)
            and bool(summary["content"].strip())
            and not summary.get("hidden", False)
        )
    section = (data.get("sections") or {}).get(key)
    return (
        isinstance(section, dict)
        and isinstance(section.get("items"), list)
        and len(section["items"]) > 0
        and not section.get("hidden", False)
    )


def apply_visibility(data: dict) -> None:
    """Hide the summary without content and every section without items."""
    summary = data.get("summary")
    if isinstance(summary, dict):
        content = summary.get("content")
        summary["hidden"] = not (isinstance(content, str) and content.strip())

    for section in (data.get("sections") or {}).values():
        if isinstance(section, dict):
            items = section.get("items")
            if not (isinstance(items, list) and items):
                section["hidden"] = True
            for item in items or []:
                if isinstance(item, dict) and not isinstance(item.get("hidden"), bool):
                    item["hidden"] = False


def estimate_summary_lines(text: str, has_sidebar: bool, config: NormalizerConfig) -> int:
    """Estimate rendered line count of the summary."""
    if not text:
        return 0
    per_line = (
        config.sidebar_chars_per_line if has_sidebar else config.full_width_chars_per_line
    )
    return math.ceil(len(text) / per_line)


def compute_layout(data: dict, config: NormalizerConfig) -> list[dict]:
    """Place every section with content exactly once.

    Main column: summary, experience, education, certifications, then any
    other content section in document order. Sidebar: skills. A summary too
    long for page 1 pushes the rest of the main column to page 2.

    Returns:
        Layout pages ``[{fullWidth, main, sidebar}]``.
    """
    sections = data.get("sections") or {}
    main = [key for key in CANONICAL_MAIN_ORDER if section_has_content(data, key)]
    main += [
        key
        for key in sections
        if key not in CANONICAL_MAIN_ORDER
        and key not in SIDEBAR_SECTIONS
        and section_has_content(data, key)
    ]
    sidebar = [key for key in SIDEBAR_SECTIONS if section_has_content(data, key)]

    summary_text = (data.get("summary") or {}).get("content") or ""
    lines = estimate_summary_lines(summary_text, bool(sidebar), config)
    overflow = "summary" in main and lines > config.max_summary_lines_page1

    if overflow and len(main) > 1:
        logger.info(
            f"Summary estimated at {lines} lines; moving remaining sections to page 2"
        )
        pages = [
            {"fullWidth": False, "main": ["summary"], "sidebar": sidebar},
            {"fullWidth": False, "main": main[1:], "sidebar": []},
        ]
    else:
        pages = [{"fullWidth": False, "main": main, "sidebar": sidebar}]

    return dedupe_layout(pages)


def dedupe_layout(pages: list[dict]) -> list[dict]:
    """Keep the first slot of every section; sidebar sections never sit in main."""
    seen: set[str] = set()
    cleaned: list[dict] = []
    for page in pages:
        main: list[str] = []
        sidebar: list[str] = []
        for key in page.get("main") or []:
            if key in SIDEBAR_SECTIONS or key in seen:
                continue
            seen.add(key)
            main.append(key)
        for key in page.get("sidebar") or []:
            if key in seen:
                continue
            seen.add(key)
            sidebar.append(key)
        cleaned.append({"fullWidth": False, "main": main, "sidebar": sidebar})
    return cleaned


def apply_layout(data: dict, config: NormalizerConfig) -> list[dict]:
    """Compute the layout and store it in ``metadata.layout.pages``."""
    pages = compute_layout(data, config)
    metadata = data.setdefault("metadata", {})
    layout = metadata.get("layout")
    if not isinstance(layout, dict):
        layout = metadata["layout"] = {}
    layout["pages"] = pages
    return pages


def apply_sidebar_constraints(data: dict, pages: list[dict], config: NormalizerConfig) -> int:
    """Cap skill keywords when skills render in the narrow sidebar.

    Returns:
        Number of keywords dropped or truncated.
    """
    if not any("skills" in (page.get("sidebar") or []) for page in pages):
        return 0

    skills = (data.get("sections") or {}).get("skills") or {}
    changed = 0
    for item in skills.get("items") or []:
        if not isinstance(item, dict) or not isinstance(item.get("keywords"), list):
            continue
        keywords = item["keywords"]
        if len(keywords) > config.max_skill_keywords:
            changed += len(keywords) - config.max_skill_keywords
            keywords = keywords[: config.max_skill_keywords]
        truncated = [truncate_label(str(k), config.max_keyword_chars) for k in keywords]
        changed += sum(1 for old, new in zip(keywords, truncated) if old != new)
        item["keywords"] = truncated
    return changed


def truncate_label(text: str, limit: int) -> str:
    """Truncate to ``limit`` characters with a trailing ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def apply_page_policy(metadata: dict, config: NormalizerConfig) -> None:
    """Clamp page geometry and pin rendering options."""
    page = metadata.setdefault("page", {})
    options = page.setdefault("options", {})
    options["breakLine"] = True
    options["pageNumbers"] = True
    if not isinstance(page.get("format"), str) or not page["format"].strip():
        page["format"] = "a4"

    for name in ("marginX", "marginY"):
        if not _is_number(page.get(name)) or page[name] < config.min_margin:
            page[name] = config.default_margin

    if not _is_number(page.get("gapX")) or page["gapX"] < config.min_gap_x:
        page["gapX"] = config.default_gap_x

    low, high = config.gap_y_range
    gap_y = page.get("gapY")
    page["gapY"] = min(max(gap_y, low), high) if _is_number(gap_y) else 10

    level = metadata.setdefault("design", {}).setdefault("level", {})
    if level.get("type") not in LEVEL_TYPES:
        level["type"] = "circle"
    if not isinstance(level.get("icon"), str) or not level["icon"]:
        level["icon"] = "circle"

    css = metadata.get("css")
    if not isinstance(css, dict):
        css = metadata["css"] = {}
    css["enabled"] = True
    css["value"] = apply_css_patch(css.get("value") if isinstance(css.get("value"), str) else "")


def apply_css_patch(css: str) -> str:
    """Replace any previous patch block with the current one."""
    base = _PATCH_BLOCK.sub("", css).rstrip()
    block = f"{CSS_PATCH_START}\n{CSS_PATCH_BODY}\n{CSS_PATCH_END}"
    return f"{base}\n\n{block}" if base else block


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
