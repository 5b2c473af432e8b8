"""Tests for task extraction from job postings.

This module tests:
- Responsibility section scoping (German and English)
- Bullet collection and the verb-line fallback
- Qualification and fluff filtering
- Cleaning, shortening, dedup and the task cap
"""

from automation_matching.analysis.extractor import (
    MAX_TASK_LENGTH,
    MAX_TASKS,
    clean_text,
    extract_tasks,
    is_qualification,
    shorten,
)
from automation_matching.models.enums import TaskSourceEnum

GERMAN_POSTING = """Für unser Team in Berlin suchen wir einen Marketing Manager (m/w/d).

Deine Aufgaben:
• Entwicklung und Umsetzung von Marketingkampagnen
• Planung des Content-Kalenders für Social Media
• Analyse der Kampagnen-Performance mit Google Analytics
• Koordination externer Agenturen und Dienstleister
• Pflege der Unternehmenswebsite im CMS
• Erstellung von monatlichen Reports für die Geschäftsführung
• Organisation von Messen und Events
• Betreuung des Newsletter-Versands

Dein Profil:
• Abgeschlossenes Studium im Bereich Marketing
• Mehrjährige Berufserfahrung im Online-Marketing
• Sehr gute Kenntnisse in Google Analytics
• Kommunikationsstärke und Teamfähigkeit
• Sehr gute Deutsch- und Englischkenntnisse
"""

ENGLISH_POSTING = """We are hiring an Operations Coordinator for our Munich site.

RESPONSIBILITIES
- Prepare weekly shipment schedules for the warehouse team
- Coordinate deliveries with external logistics partners
- Maintain the inventory records in the ERP system
- Process incoming purchase orders from customers
- Track open invoices and follow up on late payments
- Organize the monthly stock count across all locations
- Update the internal wiki with new process documentation
- Answer supplier questions by email and phone

REQUIREMENTS
- Degree in logistics or a related field
- 3+ years of experience in operations
- Strong knowledge of ERP systems
- Fluent English and German
- Team player with a hands-on attitude
"""


class TestSectionScoping:
    """Tests for scoping extraction to the responsibilities section."""

    def test_german_posting_yields_only_responsibilities(self):
        """Test that a German posting yields the eight task bullets and no profile lines."""
        tasks = extract_tasks(GERMAN_POSTING)
        texts = [task.text for task in tasks]

        assert len(tasks) == 8
        assert "Organisation von Messen und Events" in texts
        assert "Betreuung des Newsletter-Versands" in texts
        assert not any("Studium" in text or "Berufserfahrung" in text for text in texts)
        assert all(task.source == TaskSourceEnum.BULLET for task in tasks)

    def test_english_posting_stops_at_requirements(self):
        """Test that an English posting stops at the requirements heading."""
        tasks = extract_tasks(ENGLISH_POSTING)
        texts = [task.text for task in tasks]

        assert len(tasks) == 8
        assert "Maintain the inventory records in the ERP system" in texts
        assert not any("Degree" in text or "Fluent" in text for text in texts)

    def test_results_sorted_longest_first(self):
        """Test that extracted tasks are ordered by length, longest first."""
        tasks = extract_tasks(GERMAN_POSTING)
        lengths = [len(task.text) for task in tasks]

        assert lengths == sorted(lengths, reverse=True)

    def test_extraction_is_deterministic(self):
        """Test that the same input always gives the same output."""
        assert extract_tasks(ENGLISH_POSTING) == extract_tasks(ENGLISH_POSTING)


class TestFallbacks:
    """Tests for degenerate and fallback inputs."""

    def test_empty_input_returns_empty_list(self):
        """Test that empty and whitespace-only input yield no tasks."""
        assert extract_tasks("") == []
        assert extract_tasks(None) == []
        assert extract_tasks("   \n\n  ") == []

    def test_single_wrapped_task(self):
        """Test the 'Aufgabe: ...' single-task shorthand."""
        tasks = extract_tasks("Aufgabe: Boden fegen und wischen")

        assert len(tasks) == 1
        assert tasks[0].text == "Boden fegen und wischen"
        assert tasks[0].source == TaskSourceEnum.VERBLINE

    def test_verb_lines_used_when_bullets_scarce(self):
        """Test that verb-led lines are collected when there are no bullets."""
        text = (
            "Wir suchen Verstärkung.\n"
            "Pflegen der Kundendaten im CRM-System\n"
            "Koordinieren von Terminen mit Lieferanten\n"
            "Dokumentieren aller Wartungsarbeiten im Ticketsystem\n"
        )
        tasks = extract_tasks(text)

        assert len(tasks) == 3
        assert all(task.source == TaskSourceEnum.VERBLINE for task in tasks)
        assert "Wir suchen Verstärkung." not in [task.text for task in tasks]


class TestFiltering:
    """Tests for deny-list filtering, dedup and limits."""

    def test_qualifications_are_dropped(self):
        """Test that qualification bullets never become tasks."""
        text = (
            "- Mehrjährige Berufserfahrung in der Buchhaltung\n"
            "- Sehr gute Kenntnisse in MS Office\n"
            "- Eingangsrechnungen prüfen und freigeben\n"
            "- Monatsabschluss vorbereiten und begleiten\n"
            "- Zahlungsläufe planen und durchführen\n"
        )
        texts = [task.text for task in extract_tasks(text)]

        assert len(texts) == 3
        assert not any("Berufserfahrung" in t or "Kenntnisse" in t for t in texts)

    def test_is_qualification_detects_experience(self):
        """Test the qualification pattern on typical requirement lines."""
        assert is_qualification("3+ years of experience in operations")
        assert is_qualification("Abgeschlossenes Studium der Betriebswirtschaft")
        assert not is_qualification("Organisation von Messen und Events")

    def test_duplicates_are_removed(self):
        """Test that case and punctuation variants collapse to one task."""
        text = (
            "- Rechnungen prüfen und freigeben\n"
            "- Rechnungen prüfen und freigeben!\n"
            "- rechnungen Prüfen und Freigeben\n"
        )
        tasks = extract_tasks(text)

        assert len(tasks) == 1

    def test_task_count_is_capped(self):
        """Test that at most MAX_TASKS tasks are returned."""
        text = "\n".join(f"- Bearbeitung von Vorgang Nummer {i} im Archiv" for i in range(25))
        tasks = extract_tasks(text)

        assert len(tasks) == MAX_TASKS


class TestTextHelpers:
    """Tests for cleaning and shortening helpers."""

    def test_clean_text_strips_markdown_and_separators(self):
        """Test that markdown markers and trailing separators are removed."""
        assert clean_text("**Reports erstellen** ;") == "Reports erstellen"
        assert clean_text("Daten   pflegen,") == "Daten pflegen"

    def test_shorten_keeps_short_text(self):
        """Test that text within the limit is returned unchanged."""
        assert shorten("Kurzer Text") == "Kurzer Text"

    def test_shorten_cuts_long_text_at_word_boundary(self):
        """Test that long text is cut below the limit with an ellipsis."""
        text = " ".join(["Automatisierung"] * 20)
        result = shorten(text)

        assert len(result) <= MAX_TASK_LENGTH
        assert result.endswith("…")
        assert not result.endswith(" …")
