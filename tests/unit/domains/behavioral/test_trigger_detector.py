"""Tests for keyword trigger detection and label merging."""

from __future__ import annotations

import pytest

from mindwatch.domains.behavioral.domain_logic.trigger_detector import (
    DEFAULT_TRIGGER_KEYWORDS,
    TriggerDetector,
    load_keyword_table,
    merge_triggers,
)


class TestDetect:
    def test_default_keywords(self):
        labels = TriggerDetector().detect("work has been stressful and sleep is bad")
        assert {"Work Stress", "Sleep Issues"} <= labels

    def test_short_text_yields_nothing(self):
        assert TriggerDetector().detect("ok") == frozenset()
        # Exactly 10 characters is still too short
        assert TriggerDetector().detect("work sleep") == frozenset()

    def test_eleven_characters_activates(self):
        assert TriggerDetector().detect("work, sleep") == {"Work Stress", "Sleep Issues"}

    def test_case_insensitive(self):
        assert TriggerDetector().detect("FAMILY dinner was tense") == {"Family Tension"}

    def test_substring_match(self):
        # "networking" contains "work"
        assert "Work Stress" in TriggerDetector().detect("networking event tonight")

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty_text(self, text):
        assert TriggerDetector().detect(text) == frozenset()

    def test_disabled_detector(self):
        detector = TriggerDetector(enabled=False)
        assert detector.detect("work and family and sleep") == frozenset()

    def test_custom_table_replaces_defaults(self):
        detector = TriggerDetector({"Lonely": "Loneliness"})
        assert detector.detect("felt lonely all evening") == {"Loneliness"}
        assert detector.detect("work was exhausting") == frozenset()
        assert detector.keywords == {"lonely": "Loneliness"}

    def test_keywords_property_is_a_copy(self):
        detector = TriggerDetector()
        detector.keywords["work"] = "Changed"
        assert detector.keywords == DEFAULT_TRIGGER_KEYWORDS


class TestMerge:
    def test_keyword_labels_first_then_external(self):
        merged = merge_triggers({"Work Stress", "Family Tension"}, ["Loneliness", "Grief"])
        assert merged == ["Family Tension", "Work Stress", "Loneliness", "Grief"]

    def test_dedup_is_case_insensitive(self):
        merged = merge_triggers({"Work Stress"}, ["work stress", "Burnout", "BURNOUT"])
        assert merged == ["Work Stress", "Burnout"]

    def test_blank_and_non_string_labels_dropped(self):
        assert merge_triggers([], ["  ", 42, "Grief "]) == ["Grief"]

    def test_external_only(self):
        assert merge_triggers(frozenset(), ["Grief"]) == ["Grief"]


class TestLoadKeywordTable:
    def test_flat_mapping(self, tmp_path):
        path = tmp_path / "keywords.yaml"
        path.write_text("work: Work Stress\nexam: Academic Pressure\n")
        assert load_keyword_table(path) == {"work": "Work Stress", "exam": "Academic Pressure"}

    def test_nested_under_triggers(self, tmp_path):
        path = tmp_path / "keywords.yaml"
        path.write_text("triggers:\n  lonely: Loneliness\n")
        assert load_keyword_table(str(path)) == {"lonely": "Loneliness"}

    def test_empty_file_is_empty_table(self, tmp_path):
        path = tmp_path / "keywords.yaml"
        path.write_text("")
        assert load_keyword_table(path) == {}

    def test_list_rejected(self, tmp_path):
        path = tmp_path / "keywords.yaml"
        path.write_text("- work\n- sleep\n")
        with pytest.raises(ValueError, match="map keywords to labels"):
            load_keyword_table(path)

    def test_non_string_label_rejected(self, tmp_path):
        path = tmp_path / "keywords.yaml"
        path.write_text("work: 3\n")
        with pytest.raises(ValueError):
            load_keyword_table(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_keyword_table(tmp_path / "absent.yaml")
