"""Tests for the heuristic task scorer."""

import pytest

from automation_matching.analysis.scorer import (
    MAX_SCORE,
    detect_industry,
    detect_signals,
    label_for_score,
    score_task,
)
from automation_matching.models.enums import (
    AutomationLabelEnum,
    AutomationTrendEnum,
    TaskComplexityEnum,
)


class TestScoreTask:
    """Tests for score_task."""

    def test_empty_text_scores_zero(self):
        """Test that a text without signals is scored 0 and labelled Human."""
        result = score_task("")

        assert result.score == 0
        assert result.label == AutomationLabelEnum.HUMAN
        assert result.category == "general"
        assert result.signals == []

    def test_three_signals_reach_max_score(self):
        """Test that three equal-weight signals plus an industry hit give the ceiling."""
        result = score_task("Lager verwalten, Newsletter versenden und Onboarding vorbereiten")

        assert result.score == MAX_SCORE
        assert result.label == AutomationLabelEnum.AUTOMATABLE
        assert result.signals == ["marketing", "hr", "production"]
        assert result.category == "marketing"
        assert result.industry == "marketing"

    def test_single_signal_is_damped(self):
        """Test that a single signal is damped below the automatable ceiling."""
        result = score_task("Lager verwalten")

        assert result.signals == ["production"]
        assert 59 <= result.score <= 60

    @pytest.mark.parametrize(
        "base, augmented, expected_signals",
        [
            (
                "Newsletter verschicken",
                "Newsletter verschicken, Recruiting planen und Inventur durchführen",
                ["marketing", "hr", "production"],
            ),
            (
                "Patienten aufnehmen",
                "Patienten aufnehmen, Schulungen organisieren und Vertrag ablegen",
                ["healthcare", "education", "legal"],
            ),
            (
                "Rechnungen in DATEV erfassen",
                "Rechnungen in DATEV erfassen, Kennzahlen auswerten und Freigaben automatisieren",
                ["data-analysis", "finance", "ai-assisted"],
            ),
            (
                "Software deployen",
                "Software deployen, Protokoll führen und Alerts einrichten",
                ["software-development", "documentation", "monitoring"],
            ),
        ],
    )
    def test_more_equal_weight_signals_never_lower_the_score(self, base, augmented, expected_signals):
        """Test that adding two groups of the same weight to a single signal does not reduce the score."""
        single = score_task(base)
        combined = score_task(augmented)

        assert len(single.signals) == 1
        assert combined.signals == expected_signals
        assert combined.score >= single.score

    def test_human_interaction_is_capped(self):
        """Test that human interaction caps the score at 40 with high complexity."""
        result = score_task("Kundengespräche führen und beraten")

        assert result.score == 40
        assert result.label == AutomationLabelEnum.PARTIALLY_AUTOMATABLE
        assert result.complexity == TaskComplexityEnum.HIGH

    def test_management_is_capped_at_sixty(self):
        """Test the management ceiling on an otherwise high-scoring task."""
        result = score_task("Koordination des Teams und Rechnungsprüfung")

        assert result.score == 60
        assert result.label == AutomationLabelEnum.AUTOMATABLE
        assert result.automation_trend == AutomationTrendEnum.STABLE

    def test_finance_task_has_increasing_trend(self):
        """Test that high-scoring finance tasks trend upwards."""
        result = score_task("Rechnungsprüfung und Zahlungsfreigabe")

        assert result.score == MAX_SCORE
        assert result.industry == "finance"
        assert result.automation_trend == AutomationTrendEnum.INCREASING
        assert "document_processing" in result.recommended_capabilities

    def test_confidence_mirrors_score(self):
        """Test that confidence is reported as the score."""
        result = score_task("Rechnungsprüfung und Zahlungsfreigabe")

        assert result.confidence == result.score

    def test_job_title_drives_industry(self):
        """Test that the job title is used for industry detection."""
        result = score_task("Lager verwalten", job_title="Buchhalter (m/w/d)")

        assert result.industry == "finance"

    @pytest.mark.parametrize(
        "text",
        [
            "Software deployen und Datenbank pflegen",
            "Patienten betreuen",
            "Monatliche Berichte und Dashboards erstellen",
            "Strategie entwickeln",
        ],
    )
    def test_score_stays_in_bounds(self, text):
        """Test that every score is within 0..85 and matches its label."""
        result = score_task(text)

        assert 0 <= result.score <= MAX_SCORE
        assert result.label == label_for_score(result.score)

    def test_automation_potential_is_fraction(self):
        """Test the 0..1 view of the score used by the matcher."""
        result = score_task("Rechnungsprüfung und Zahlungsfreigabe")

        assert result.automation_potential == pytest.approx(0.85)


class TestHelpers:
    """Tests for label thresholds and detectors."""

    def test_label_thresholds(self):
        """Test the 60 / 20 label boundaries."""
        assert label_for_score(60) == AutomationLabelEnum.AUTOMATABLE
        assert label_for_score(59) == AutomationLabelEnum.PARTIALLY_AUTOMATABLE
        assert label_for_score(20) == AutomationLabelEnum.PARTIALLY_AUTOMATABLE
        assert label_for_score(19) == AutomationLabelEnum.HUMAN

    def test_detect_industry_defaults_to_general(self):
        """Test that unknown text maps to the general industry."""
        assert detect_industry("Boden fegen") == "general"

    def test_detect_signals_keeps_table_order(self):
        """Test that signal groups are returned in table order."""
        names = [group.name for group in detect_signals("Produktion überwachen und Daten auswerten")]

        assert names == ["data-analysis", "production", "monitoring"]
