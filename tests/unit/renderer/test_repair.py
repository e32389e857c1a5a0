"""Unit tests for validation-error parsing and repair."""

import json

import pytest

from src.normalizer.document import WorkingDocument
from src.renderer.models import RepairPatch
from src.renderer.repair import (
    UNTITLED,
    apply_repair_patches,
    build_payload,
    parse_validation_errors,
    type_default,
)


def _issue(path, **fields):
    return {"path": path, **fields}


class TestParseValidationErrors:
    """Tests for parse_validation_errors."""

    def test_top_level_issues(self):
        body = json.dumps(
            {"issues": [_issue(["data", "summary", "title"], expected="string", code="too_small")]}
        )

        patches = parse_validation_errors(body)

        assert len(patches) == 1
        assert patches[0].path == ["data", "summary", "title"]
        assert patches[0].expected_type == "string"
        assert patches[0].error_code == "too_small"
        assert patches[0].dotted_path == "data.summary.title"

    def test_issues_wrapped_in_data(self):
        body = {"data": {"issues": [_issue(["data", "basics", "website"], expected="object")]}}

        patches = parse_validation_errors(body)

        assert [p.error_code for p in patches] == ["invalid_type"]

    def test_unparseable_body(self):
        assert parse_validation_errors("<html>Bad Request</html>") == []
        assert parse_validation_errors(None) == []
        assert parse_validation_errors('["not", "an", "object"]') == []

    def test_issue_without_path_is_skipped(self):
        body = {"issues": [{"expected": "string"}, _issue([], expected="string")]}
        assert parse_validation_errors(body) == []

    def test_too_small_string_without_expected(self):
        body = {"issues": [_issue(["data", "basics", "name"], code="too_small", origin="string", minimum=2)]}

        patch = parse_validation_errors(body)[0]

        assert patch.expected_type == "string"
        assert patch.minimum == 2

    def test_invalid_value_becomes_enum(self):
        body = {
            "issues": [
                _issue(["data", "metadata", "page", "format"], code="invalid_value", values=["a4", "letter"])
            ]
        }

        patch = parse_validation_errors(body)[0]

        assert patch.expected_type == "enum"
        assert patch.allowed_values == ["a4", "letter"]

    def test_unknown_issue_kind_is_skipped(self):
        body = {"issues": [_issue(["data", "x"], code="custom")]}
        assert parse_validation_errors(body) == []


class TestTypeDefault:
    """Tests for type_default."""

    def test_known_object(self):
        assert type_default("website", "object") == {"label": "", "url": ""}

    def test_unknown_object(self):
        assert type_default("anything", "object") == {}

    @pytest.mark.parametrize(
        ("expected", "value"),
        [("string", ""), ("number", 0), ("boolean", False), ("array", []), ("enum", "")],
    )
    def test_scalars(self, expected, value):
        assert type_default("field", expected) == value


class TestApplyRepairPatches:
    """Tests for apply_repair_patches."""

    def test_empty_title_takes_sibling_name(self):
        root = {"data": {"summary": {"name": "Jane Doe", "title": "", "content": "x"}}}
        patch = RepairPatch(path=["data", "summary", "title"], expected_type="string", error_code="too_small")

        assert apply_repair_patches(root, [patch]) == 1
        assert root["data"]["summary"]["title"] == "Jane Doe"

    def test_empty_title_without_name_is_untitled(self):
        root = {"data": {"sections": {"custom": {"title": ""}}}}
        patch = RepairPatch(
            path=["data", "sections", "custom", "title"], expected_type="string", error_code="too_small"
        )

        apply_repair_patches(root, [patch])

        assert root["data"]["sections"]["custom"]["title"] == UNTITLED

    def test_missing_title_takes_sibling_name(self):
        root = {"data": {"sections": {"custom": {"name": "Awards"}}}}
        patch = RepairPatch(path=["data", "sections", "custom", "title"], expected_type="string")

        apply_repair_patches(root, [patch])

        assert root["data"]["sections"]["custom"]["title"] == "Awards"

    def test_mistyped_object_gets_default(self):
        root = {"data": {"basics": {"website": "x"}}}
        patch = RepairPatch(path=["data", "basics", "website"], expected_type="object")

        apply_repair_patches(root, [patch])

        assert root["data"]["basics"]["website"] == {"label": "", "url": ""}

    def test_partial_object_is_completed(self):
        root = {"data": {"basics": {"website": {"url": "https://jane.dev"}}}}
        patch = RepairPatch(path=["data", "basics", "website"], expected_type="object")

        apply_repair_patches(root, [patch])

        assert root["data"]["basics"]["website"] == {"url": "https://jane.dev", "label": ""}

    def test_missing_intermediates_are_created(self):
        root = {"data": {}}
        patch = RepairPatch(
            path=["data", "sections", "skills", "items", 0, "keywords"], expected_type="array"
        )

        assert apply_repair_patches(root, [patch]) == 1
        assert root["data"]["sections"]["skills"]["items"] == [{"keywords": []}]

    def test_numeric_string_segment_is_an_index(self):
        root = {"data": {"sections": {"skills": {"items": [{"keywords": None}]}}}}
        patch = RepairPatch(
            path=["data", "sections", "skills", "items", "0", "keywords"], expected_type="array"
        )

        apply_repair_patches(root, [patch])

        assert root["data"]["sections"]["skills"]["items"][0]["keywords"] == []

    def test_list_index_leaf_is_padded(self):
        root = {"data": {"metadata": {"layout": {"pages": []}}}}
        patch = RepairPatch(path=["data", "metadata", "layout", "pages", 1], expected_type="object")

        apply_repair_patches(root, [patch])

        assert root["data"]["metadata"]["layout"]["pages"] == [{}, {}]

    def test_level_type_becomes_circle(self):
        root = {"data": {"metadata": {"design": {"level": {"type": "stars"}}}}}
        patch = RepairPatch(
            path=["data", "metadata", "design", "level", "type"],
            expected_type="enum",
            error_code="invalid_value",
            allowed_values=["hidden", "circle"],
        )

        apply_repair_patches(root, [patch])

        assert root["data"]["metadata"]["design"]["level"]["type"] == "circle"

    def test_other_enum_takes_first_allowed_value(self):
        root = {"data": {"metadata": {"page": {"format": "tabloid"}}}}
        patch = RepairPatch(
            path=["data", "metadata", "page", "format"],
            expected_type="enum",
            error_code="invalid_value",
            allowed_values=["a4", "letter"],
        )

        apply_repair_patches(root, [patch])

        assert root["data"]["metadata"]["page"]["format"] == "a4"

    def test_missing_color_uses_theme_default(self):
        root = {"data": {"metadata": {"design": {"colors": {}}}}}
        patch = RepairPatch(path=["data", "metadata", "design", "colors", "background"], expected_type="string")

        apply_repair_patches(root, [patch])

        assert root["data"]["metadata"]["design"]["colors"]["background"] == "#ffffff"

    def test_scalar_coercion(self):
        root = {"data": {"summary": {"columns": "2", "hidden": "yes", "content": 5}}}
        patches = [
            RepairPatch(path=["data", "summary", "columns"], expected_type="number"),
            RepairPatch(path=["data", "summary", "hidden"], expected_type="boolean"),
            RepairPatch(path=["data", "summary", "content"], expected_type="string"),
        ]

        apply_repair_patches(root, patches)

        assert root["data"]["summary"] == {"columns": 0, "hidden": True, "content": "5"}

    def test_unreachable_path_is_not_counted(self):
        root = {"data": {}}
        patch = RepairPatch(path=[0, "title"], expected_type="string")

        assert apply_repair_patches(root, [patch]) == 0

    def test_already_valid_value_is_not_counted(self):
        root = {"data": {"basics": {"name": "Jane"}}}
        patch = RepairPatch(path=["data", "basics", "name"], expected_type="string")

        assert apply_repair_patches(root, [patch]) == 0


class TestBuildPayload:
    """Tests for build_payload."""

    def test_joins_experience_bullets(self, sample_template):
        document = WorkingDocument(sample_template).freeze()

        payload = build_payload(document)

        item = payload["data"]["sections"]["experience"]["items"][0]
        assert item["description"] == (
            "Built dashboards for the finance team\n\n"
            "Automated monthly reporting to cut close time by 30%"
        )
        assert isinstance(
            document.get(("data", "sections", "experience", "items", 0, "description")), list
        )

    def test_payload_is_a_private_copy(self, sample_template):
        document = WorkingDocument(sample_template).freeze()

        payload = build_payload(document)
        payload["data"]["basics"]["name"] = "Changed"

        assert document.get(("data", "basics", "name")) == "Jane Doe"
