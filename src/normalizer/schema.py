"""Declarative document schema and the recursive hardening pass.

A schema is a tree of rules:

- ``Leaf(type, default)``: a scalar, list or object that must have the given
  type; the default may be a value or a function of the surrounding context.
- ``Nested(children, each, default)``: an object whose named children are
  checked in declaration order; ``each`` applies to every other key.
- ``ArrayOf(item)``: a list whose object elements are checked against ``item``.

Hardening only touches values that are missing or have the wrong type, so
running it twice changes nothing the second time.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from src.normalizer.document import DocPath, get_path


class FieldType(str, Enum):
    """JSON value types the renderer validates."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"

    def matches(self, value: Any) -> bool:
        """Whether value has this type (booleans are not numbers)."""
        if self is FieldType.STRING:
            return isinstance(value, str)
        if self is FieldType.NUMBER:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self is FieldType.BOOLEAN:
            return isinstance(value, bool)
        if self is FieldType.OBJECT:
            return isinstance(value, dict)
        return isinstance(value, list)

    def empty(self) -> Any:
        """The neutral default for this type."""
        return {
            FieldType.STRING: "",
            FieldType.NUMBER: 0,
            FieldType.BOOLEAN: False,
            FieldType.OBJECT: {},
            FieldType.ARRAY: [],
        }[self]


@dataclass(frozen=True)
class RuleContext:
    """What a conditional default can see.

    Attributes:
        root: The whole document tree.
        node: The object that holds the field being defaulted.
        path: Path of ``node``.
        key: Name of the field being defaulted.
    """

    root: dict
    node: dict
    path: DocPath
    key: str


DefaultFactory = Callable[[RuleContext], Any]


@dataclass(frozen=True)
class Leaf:
    type: FieldType
    default: Any = None

    def resolve(self, context: RuleContext) -> Any:
        if callable(self.default):
            return self.default(context)
        if self.default is None:
            return self.type.empty()
        return copy.deepcopy(self.default)


@dataclass(frozen=True)
class Nested:
    children: Mapping[str, SchemaRule] = field(default_factory=dict)
    each: SchemaRule | None = None
    default: DefaultFactory | None = None


@dataclass(frozen=True)
class ArrayOf:
    item: Nested | None = None


SchemaRule = Union[Leaf, Nested, ArrayOf]

_MISSING = object()


def harden(root: dict, schema: Nested) -> list[DocPath]:
    """Fill every missing or mistyped value the schema describes.

    Args:
        root: Document tree, modified in place.
        schema: Rule for the root object.

    Returns:
        Paths that were (re)set, in visiting order.
    """
    changes: list[DocPath] = []
    _fill_object(schema, root, root, (), changes)
    return changes


def _apply(
    rule: SchemaRule,
    parent: dict,
    key: str,
    root: dict,
    parent_path: DocPath,
    changes: list[DocPath],
) -> None:
    path = parent_path + (key,)
    value = parent.get(key, _MISSING)
    context = RuleContext(root=root, node=parent, path=parent_path, key=key)

    if isinstance(rule, Leaf):
        if value is _MISSING or not rule.type.matches(value):
            parent[key] = rule.resolve(context)
            changes.append(path)
        return

    if isinstance(rule, Nested):
        if not isinstance(value, dict):
            parent[key] = rule.default(context) if rule.default else {}
            changes.append(path)
        _fill_object(rule, parent[key], root, path, changes)
        return

    if not isinstance(value, list):
        parent[key] = []
        changes.append(path)
    if rule.item is not None:
        for index, element in enumerate(parent[key]):
            if isinstance(element, dict):
                _fill_object(rule.item, element, root, path + (index,), changes)


def _fill_object(
    rule: Nested,
    node: dict,
    root: dict,
    path: DocPath,
    changes: list[DocPath],
) -> None:
    for name, child in rule.children.items():
        _apply(child, node, name, root, path, changes)
    if rule.each is not None:
        for name in list(node):
            if name not in rule.children:
                _apply(rule.each, node, name, root, path, changes)


def iter_rules(rule: SchemaRule, path: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], Leaf]]:
    """Flatten a schema into ``(path, leaf)`` pairs.

    ``*`` stands for any key of a mapping, ``[]`` for any array element.
    """
    if isinstance(rule, Leaf):
        yield path, rule
    elif isinstance(rule, Nested):
        for name, child in rule.children.items():
            yield from iter_rules(child, path + (name,))
        if rule.each is not None:
            yield from iter_rules(rule.each, path + ("*",))
    else:
        yield path, Leaf(FieldType.ARRAY)
        if rule.item is not None:
            yield from iter_rules(rule.item, path + ("[]",))


# Conditional defaults

SECTION_TITLES = {
    "awards": "Awards",
    "certifications": "Certifications",
    "education": "Education",
    "experience": "Experience",
    "interests": "Interests",
    "languages": "Languages",
    "profiles": "Profiles",
    "projects": "Projects",
    "publications": "Publications",
    "references": "References",
    "skills": "Skills",
    "volunteer": "Volunteer",
}

DEFAULT_FONT = "Inter"
DEFAULT_THEME = {"primary": "#000000", "text": "#000000", "background": "#ffffff"}


def section_title(context: RuleContext) -> str:
    key = str(context.path[-1]) if context.path else ""
    return SECTION_TITLES.get(key, key[:1].upper() + key[1:])


def hidden_without_url(context: RuleContext) -> bool:
    url = context.node.get("url")
    return not (isinstance(url, str) and url.strip())


def hidden_without_content(context: RuleContext) -> bool:
    content = context.node.get("content")
    return not (isinstance(content, str) and content.strip())


def hidden_without_items(context: RuleContext) -> bool:
    items = context.node.get("items")
    return not (isinstance(items, list) and len(items) > 0)


def website_from_value(context: RuleContext) -> dict:
    """Keep a bare URL string when it is upgraded to a website object."""
    value = context.node.get(context.key)
    if isinstance(value, str):
        return {"url": value.strip(), "label": ""}
    return {}


def color_from_theme(context: RuleContext) -> str:
    theme_value = get_path(context.root, ("data", "metadata", "theme", context.key))
    if isinstance(theme_value, str) and theme_value.strip():
        return theme_value
    return DEFAULT_THEME.get(context.key, "#000000")


def font_from_typography(context: RuleContext) -> str:
    family = get_path(context.root, ("data", "metadata", "typography", "font", "family"))
    if isinstance(family, str) and family.strip():
        return family
    return DEFAULT_FONT


_S = FieldType.STRING
_N = FieldType.NUMBER
_B = FieldType.BOOLEAN

ITEM_RULE = Nested({"hidden": Leaf(_B, False)})

SECTION_RULE = Nested(
    {
        "title": Leaf(_S, section_title),
        "columns": Leaf(_N, 1),
        "items": ArrayOf(ITEM_RULE),
        "hidden": Leaf(_B, hidden_without_items),
    }
)

DOCUMENT_SCHEMA = Nested(
    {
        "data": Nested(
            {
                "basics": Nested(
                    {
                        "name": Leaf(_S, ""),
                        "headline": Leaf(_S, ""),
                        "email": Leaf(_S, ""),
                        "phone": Leaf(_S, ""),
                        "location": Leaf(_S, ""),
                        "website": Nested(
                            {"url": Leaf(_S, ""), "label": Leaf(_S, "")},
                            default=website_from_value,
                        ),
                        "customFields": ArrayOf(),
                    }
                ),
                "picture": Nested(
                    {
                        "url": Leaf(_S, ""),
                        "size": Leaf(_N, 200),
                        "aspectRatio": Leaf(_N, 1),
                        "borderRadius": Leaf(_N, 0),
                        "hidden": Leaf(_B, hidden_without_url),
                        "rotation": Leaf(_N, 0),
                        "borderColor": Leaf(_S, ""),
                        "borderWidth": Leaf(_N, 0),
                        "shadowColor": Leaf(_S, ""),
                        "shadowWidth": Leaf(_N, 0),
                        "effects": Nested(
                            {
                                "hidden": Leaf(_B, False),
                                "border": Leaf(_B, False),
                                "grayscale": Leaf(_B, False),
                            }
                        ),
                    }
                ),
                "summary": Nested(
                    {
                        "title": Leaf(_S, ""),
                        "content": Leaf(_S, ""),
                        "columns": Leaf(_N, 1),
                        "hidden": Leaf(_B, hidden_without_content),
                    }
                ),
                "sections": Nested(
                    {
                        "profiles": Nested(
                            {
                                "title": Leaf(_S, "Profiles"),
                                "columns": Leaf(_N, 1),
                                "items": ArrayOf(ITEM_RULE),
                                "hidden": Leaf(_B, hidden_without_items),
                            }
                        ),
                    },
                    each=SECTION_RULE,
                ),
                "metadata": Nested(
                    {
                        "layout": Nested({"pages": ArrayOf()}),
                        "css": Nested(
                            {"enabled": Leaf(_B, True), "value": Leaf(_S, "")}
                        ),
                        "theme": Nested(
                            {name: Leaf(_S, value) for name, value in DEFAULT_THEME.items()}
                        ),
                        "design": Nested(
                            {
                                "level": Nested(
                                    {
                                        "icon": Leaf(_S, "circle"),
                                        "type": Leaf(_S, "circle"),
                                    }
                                ),
                                "colors": Nested(
                                    {
                                        "primary": Leaf(_S, color_from_theme),
                                        "text": Leaf(_S, color_from_theme),
                                        "background": Leaf(_S, color_from_theme),
                                    }
                                ),
                            }
                        ),
                        "typography": Nested(
                            {
                                "body": Nested(
                                    {"fontFamily": Leaf(_S, font_from_typography)}
                                ),
                                "heading": Nested(
                                    {"fontFamily": Leaf(_S, font_from_typography)}
                                ),
                            }
                        ),
                        "page": Nested(
                            {
                                "format": Leaf(_S, "a4"),
                                "marginX": Leaf(_N, 36),
                                "marginY": Leaf(_N, 36),
                                "gapX": Leaf(_N, 32),
                                "gapY": Leaf(_N, 10),
                                "options": Nested(
                                    {
                                        "breakLine": Leaf(_B, True),
                                        "pageNumbers": Leaf(_B, True),
                                    }
                                ),
                            }
                        ),
                        "notes": Leaf(_S, ""),
                    }
                ),
            }
        ),
    }
)
