"""
Test suite for documentsPipeline helpers.

System role: Verification of the per-process document pipeline
"""

import json

from backend.core.documents_pipeline import (
    build_entry,
    parse_pipeline,
    remove_entry,
    serialize_pipeline,
    update_entry_status,
    upsert_entry,
    utc_now_iso,
)


def _entry(document_type: str, file_hash: str, **kwargs) -> dict:
    return build_entry(document_type, file_hash, uploaded_at="2024-01-01T00:00:00Z", **kwargs)


class TestParsePipeline:
    """Test suite for parse_pipeline."""

    def test_should_parse_json_text(self):
        raw = json.dumps([{"documentType": "bl", "fileHash": "h1"}])

        assert parse_pipeline(raw) == [{"documentType": "bl", "fileHash": "h1"}]

    def test_should_accept_lists(self):
        entries = [{"documentType": "di"}]

        parsed = parse_pipeline(entries)

        assert parsed == entries
        assert parsed is not entries

    def test_should_reset_invalid_values(self):
        assert parse_pipeline(None) == []
        assert parse_pipeline("") == []
        assert parse_pipeline("not json") == []
        assert parse_pipeline('{"documentType": "bl"}') == []
        assert parse_pipeline(42) == []

    def test_serialize_should_keep_accents(self):
        assert serialize_pipeline([{"documentType": "numerário"}]) == '[{"documentType": "numerário"}]'


class TestEntries:
    """Test suite for pipeline entry helpers."""

    def test_build_entry_defaults(self):
        entry = build_entry("bl", "h1")

        assert entry["status"] == "pending"
        assert entry["documentId"] is None
        assert entry["processedAt"] is None
        assert entry["uploadedAt"].endswith("Z")
        assert "error" not in entry

    def test_build_entry_should_keep_error(self):
        assert build_entry("bl", "h1", status="error", error="boom")["error"] == "boom"

    def test_upsert_should_replace_entry_with_same_hash(self):
        entries = [_entry("bl", "h1"), _entry("di", "h2")]

        result = upsert_entry(entries, _entry("commercial_invoice", "h1", status="completed"))

        assert [e["documentType"] for e in result] == ["commercial_invoice", "di"]
        assert entries[0]["documentType"] == "bl"

    def test_upsert_should_replace_entry_with_same_type(self):
        entries = [_entry("bl", "h1")]

        result = upsert_entry(entries, _entry("bl", "h9"))

        assert len(result) == 1
        assert result[0]["fileHash"] == "h9"

    def test_upsert_should_append_new_entry(self):
        result = upsert_entry([_entry("bl", "h1")], _entry("di", "h2"))

        assert [e["fileHash"] for e in result] == ["h1", "h2"]

    def test_update_entry_status_should_merge_fields_by_type(self):
        entries = [_entry("bl", "h1"), _entry("di", "h2")]

        result = update_entry_status(entries, "di", status="completed", documentId="7")

        assert result[0]["status"] == "pending"
        assert result[1]["status"] == "completed"
        assert result[1]["documentId"] == "7"

    def test_remove_entry_should_filter_by_hash(self):
        result = remove_entry([_entry("bl", "h1"), _entry("di", "h2")], "h1")

        assert [e["fileHash"] for e in result] == ["h2"]

    def test_utc_now_iso_should_use_z_suffix(self):
        assert utc_now_iso().endswith("Z")
