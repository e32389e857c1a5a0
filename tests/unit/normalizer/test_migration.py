"""Unit tests for field-name migration."""

from src.normalizer.migration import migrate_item, migrate_item_fields, relocate_legacy_nodes


class TestMigrateItem:
    """Tests for per-item renames and required fields."""

    def test_education_legacy_fields(self):
        item = {"institution": "State U", "studyType": "BSc", "score": "3.8", "date": "2015"}

        renamed = migrate_item("education", item)

        assert renamed == 4
        assert item == {
            "school": "State U",
            "degree": "BSc",
            "grade": "3.8",
            "period": "2015",
            "location": "",
            "website": {"label": "", "url": ""},
            "description": "",
        }

    def test_canonical_field_wins(self):
        item = {"date": "2019", "period": "2020"}

        migrate_item("experience", item)

        assert item["period"] == "2020"
        assert item["date"] == "2019"

    def test_url_becomes_website_object(self):
        item = {"url": "https://acme.example"}

        migrate_item("experience", item)

        assert item["website"] == {"label": "", "url": "https://acme.example"}
        assert "url" not in item

    def test_website_href_is_normalized(self):
        item = {"website": {"href": "https://acme.example", "label": "Acme"}}

        migrate_item("certifications", item)

        assert item["website"] == {"label": "Acme", "url": "https://acme.example"}

    def test_experience_summary_split_into_sentences(self):
        item = {"summary": "Led a team. Built tools."}

        migrate_item("experience", item)

        assert item["description"] == ["Led a team.", "Built tools."]

    def test_experience_description_text_becomes_bullets(self):
        item = {"description": "• First\n• Second"}

        migrate_item("experience", item)

        assert item["description"] == ["First", "Second"]

    def test_numeric_date_becomes_string(self):
        item = {"date": 2019}

        migrate_item("experience", item)

        assert item["period"] == "2019"

    def test_education_description_list_joined(self):
        item = {"description": ["Thesis", "Honours"]}

        migrate_item("education", item)

        assert item["description"] == "Thesis\nHonours"

    def test_migrate_item_fields_counts(self, sample_template):
        renamed = migrate_item_fields(sample_template["data"])

        # experience date, education institution/studyType/score
        assert renamed == 4


class TestRelocateLegacyNodes:
    """Tests for moving misplaced nodes."""

    def test_sections_summary_moves_when_missing(self):
        data = {"sections": {"summary": {"content": "Old summary"}}}

        moves = relocate_legacy_nodes(data)

        assert data["summary"] == {"content": "Old summary"}
        assert "summary" not in data["sections"]
        assert moves == ["sections.summary -> summary"]

    def test_existing_summary_content_wins(self):
        data = {
            "summary": {"content": "Current"},
            "sections": {"summary": {"content": "Old"}},
        }

        relocate_legacy_nodes(data)

        assert data["summary"]["content"] == "Current"
        assert "summary" not in data["sections"]

    def test_basics_picture_and_url(self):
        data = {"basics": {"picture": {"url": "p.png"}, "url": "https://jane.dev"}}

        moves = relocate_legacy_nodes(data)

        assert data["picture"] == {"url": "p.png"}
        assert data["basics"]["website"] == {"label": "", "url": "https://jane.dev"}
        assert "url" not in data["basics"]
        assert len(moves) == 2
