"""Task extraction from free-text job postings.

Turns a raw posting (German or English) into a deduplicated list of task
strings:

1. Scope the text to the responsibilities section when one is present,
   stopping at the requirements / benefits section.
2. Collect bullet lines; fall back to verb-led lines when fewer than three
   bullets were found.
3. Clean, shorten, deduplicate and sort longest-first (max 20).

Deny-list filtering (headings, fluff, qualifications) runs on the raw line,
again on the cleaned text, and once more at dedup time. Qualification lines
that also start with a task verb must still be dropped, so do not collapse
these passes.
"""

import re
from dataclasses import dataclass

from automation_matching.models.enums import TaskSourceEnum

MAX_TASK_LENGTH = 140
MAX_TASKS = 20
MIN_TASK_LENGTH = 10
MIN_BULLETS_BEFORE_VERB_FALLBACK = 3

SECTION_START = re.compile(
    r"\b(aufgaben|verantwortlichkeiten|zuständigkeiten|tätigkeiten|zur rolle|rolle|deine aufgaben)\b"
    r"|\b(responsibilities|duties|what you will do|role|your role|tasks)\b",
    re.IGNORECASE,
)

SECTION_END = re.compile(
    r"\b(hard facts|details zum jobangebot|benefits|leistungen|profil|dein profil|anforderungen|qualifikationen|kontakt)\b"
    r"|\b(benefits|perks|about you|requirements|qualifications|contact|about us|company)\b",
    re.IGNORECASE,
)

# Dash/bullet glyphs, "1.", "(1)", "a.", "(a)"
BULLET = re.compile(
    r"^\s*(?:[-–—*•●▪▫◦‣⁃]|[0-9]+\.|\([0-9]+\)|[a-z]\.|\([a-z]\))\s+(.+)$",
    re.IGNORECASE,
)

VERB_LINE = re.compile(
    r"^(?:[–—-]\s*)?(?:entwickeln|gestalten|planen|koordinieren|analysieren|implementieren|pflegen"
    r"|migrieren|übernehmen|führen|mentoren|betreuen|optimieren|automatisieren|dokumentieren"
    r"|überwachen|integrieren)\b"
    r"|^(?:[–—-]\s*)?(?:develop|design|plan|coordinate|analy[sz]e|implement|maintain|migrate|lead"
    r"|mentor|own|optimi[sz]e|automate|document|monitor|integrate)\b",
    re.IGNORECASE,
)

SINGLE_WRAPPED_TASK = re.compile(r"^aufgabe:\s*", re.IGNORECASE)

QUALIFICATION_PATTERNS = [
    # Education
    re.compile(r"\b(ausbildung|studium|abschluss|degree|education|background|certified|certification)\b", re.I),
    re.compile(r"\b(steuerfachangestellte|buchhalter|accountant|tax specialist|steuerberatung)\b", re.I),
    # Experience
    re.compile(r"\b(erfahrung|experience|jahre|years|berufserfahrung|work experience)\b", re.I),
    re.compile(r"\b(mehrjährig|langjährig|long-term|several years)\b", re.I),
    # Knowledge and tools
    re.compile(
        r"\b(kenntnisse|knowledge|skills|fähigkeiten|fertigkeiten|competence|proficiency|vertraut|familiar)\b",
        re.I,
    ),
    re.compile(
        r"\b(datev|sap|software kenntnisse|tool kenntnisse|system kenntnisse|application knowledge)\b", re.I
    ),
    re.compile(r"\b(pc-kenntnisse|computer skills|it-kenntnisse|software skills|ms office)\b", re.I),
    re.compile(
        r"\b(sprachkenntnisse|language|englisch|deutsch|english|german|französisch|french)\b", re.I
    ),
    # Soft skills
    re.compile(r"\b(genauigkeit|zuverlässigkeit|accuracy|reliability|sorgfalt|precision)\b", re.I),
    re.compile(r"\b(kommunikationsstärke|communication skills|soft skills|social skills)\b", re.I),
    re.compile(r"\b(teamfähigkeit|team player|leadership skills|führungskompetenz)\b", re.I),
    re.compile(r"\b(belastbarkeit|stress resistance|flexibilität|flexibility)\b", re.I),
    re.compile(r"\b(geduld|patience|empathie|empathy|freundlich|friendly|höflich|polite)\b", re.I),
    re.compile(r"\b(professionell|professional)\s+(auftreten|demeanor|erscheinung|behavior)\b", re.I),
    # Legal and domain knowledge
    re.compile(r"\b(steuerrechtlich|tax law|rechtlich|legal|compliance|regulatory)\b", re.I),
    re.compile(r"\b(bilanzierung|accounting standards|gaap|ifrs|hgb)\b", re.I),
    # Prerequisites
    re.compile(
        r"\b(voraussetzung|requirement|must have|should have|preferred|wünschenswert|nice to have)\b", re.I
    ),
    re.compile(r"\b(berechtigung|lizenz|license|permit|authorization|zertifikat|certificate)\b", re.I),
    re.compile(r"^\s*(?:mindestens|minimum|at least)\s+\d+", re.I),
    # Degrees
    re.compile(r"\b(?:bachelor|master|diplom|phd|dr\.|mba|fachhochschule|universität|university)\b", re.I),
    re.compile(r"\b(?:kaufmännisch|commercial|business|wirtschafts|betriebswirt)\b", re.I),
]

FLUFF_PATTERNS = [
    re.compile(
        r"\b(hard facts|details|benefits|profil|qualifikationen|anforderungen|requirement|qualification"
        r"|benefit|perk|nice to have|plus|bonus)\b",
        re.I,
    ),
    re.compile(r"^\s*(?:weitere|additional|other|more)\s+", re.I),
    re.compile(r"^\s*(?:sonstige|miscellaneous|various)\s+", re.I),
    re.compile(r"\b(?:etc\.?|usw\.?|and more|and similar)\s*$", re.I),
    # Application and contact boilerplate
    re.compile(r"bewerben sie sich|weitere informationen|link hierzu|kontakt|bewerbung|stellenausschreibung", re.I),
    re.compile(r"^\s*den\s+link.*weitere\s+informationen", re.I),
    re.compile(r"^.{1,15}$"),
    re.compile(r"^\s*(&nbsp;)+", re.I),
    re.compile(r"^(email|e-mail|telefon|kontakt|adresse|navigation|menu|zurück|weiter|home|start)$", re.I),
    re.compile(r"^\d+\s*$"),
    # Lone verbs
    re.compile(r"^(entwickeln|planen|arbeiten|führen|koordinieren|unterstützen)$", re.I),
]

HEADING_PATTERNS = [
    re.compile(r"^(?:aufgaben|deine aufgaben|responsibilities|duties|role|tasks):?\s*$", re.I),
    re.compile(r"^(?:zu|in|for|as)\s+(?:dieser|your|this|the)\s+(?:stelle|position|role)", re.I),
    re.compile(r"^(?:als|as)\s+(?:unser|our)", re.I),
]


@dataclass(frozen=True)
class RawTask:
    """A candidate task line pulled out of a job posting."""

    text: str
    source: TaskSourceEnum


def is_qualification(text: str) -> bool:
    return any(p.search(text) for p in QUALIFICATION_PATTERNS)


def is_fluff(text: str) -> bool:
    stripped = text.strip()
    return any(p.search(stripped) for p in FLUFF_PATTERNS)


def is_heading_or_intro(text: str) -> bool:
    return any(p.search(text) for p in HEADING_PATTERNS)


def _is_denied(text: str) -> bool:
    return is_heading_or_intro(text) or is_fluff(text) or is_qualification(text)


def clean_text(text: str) -> str:
    """Strip markdown leftovers, collapse whitespace and trailing separators."""
    text = re.sub(r"[*_`#>]+", " ", text)
    text = re.sub(r"\s{2,}", " ", text)
    text = re.sub(r"\s+[,;]$", "", text)
    return text.strip().rstrip(",;").strip()


def shorten(text: str, limit: int = MAX_TASK_LENGTH) -> str:
    """Cut text to at most `limit` chars, preferring sentence then word boundaries."""
    if len(text) <= limit:
        return text
    head = text[: limit - 1]
    sentence_end = max(head.rfind(". "), head.rfind("! "), head.rfind("? "), head.rfind("; "))
    if sentence_end >= limit // 2:
        return head[: sentence_end + 1].rstrip()
    word_end = head.rfind(" ")
    if word_end >= limit // 2:
        head = head[:word_end]
    return head.rstrip(" ,;:-") + "…"


def dedup_key(text: str) -> str:
    return re.sub(r"[^\w\s]", "", text.lower())


def _scope_lines(lines: list[str]) -> list[str]:
    start = next((i for i, line in enumerate(lines) if SECTION_START.search(line)), -1)
    scoped = lines[start + 1 :] if start >= 0 else lines
    stop = next((i for i, line in enumerate(scoped) if SECTION_END.search(line)), -1)
    if stop >= 0:
        scoped = scoped[:stop]
    return scoped


def _collect_bullets(lines: list[str]) -> list[RawTask]:
    bullets: list[RawTask] = []
    for line in lines:
        if _is_denied(line):
            continue
        match = BULLET.match(line)
        if not match or len(match.group(1)) < MIN_TASK_LENGTH:
            continue
        cleaned = clean_text(match.group(1))
        if is_qualification(cleaned):
            continue
        text = shorten(cleaned)
        if len(text) >= MIN_TASK_LENGTH:
            bullets.append(RawTask(text=text, source=TaskSourceEnum.BULLET))
    return bullets


def _collect_verb_lines(lines: list[str]) -> list[RawTask]:
    verb_lines: list[RawTask] = []
    for line in lines:
        if _is_denied(line) or not VERB_LINE.search(line):
            continue
        text = shorten(clean_text(line))
        if len(text) >= MIN_TASK_LENGTH and not is_qualification(text):
            verb_lines.append(RawTask(text=text, source=TaskSourceEnum.VERBLINE))
    return verb_lines


def extract_tasks(text: str | None) -> list[RawTask]:
    """Extract candidate task lines from a job posting.

    Empty or whitespace-only input yields an empty list. The result is
    deterministic for a given input.
    """
    if not text:
        return []
    lines = [line.strip() for line in re.split(r"\r?\n", text)]
    lines = [line for line in lines if line]
    if not lines:
        return []

    # "Aufgabe: boden fegen" style single-task input
    if len(lines) == 1 and SINGLE_WRAPPED_TASK.match(lines[0]):
        task_text = clean_text(SINGLE_WRAPPED_TASK.sub("", lines[0]))
        return [RawTask(text=task_text, source=TaskSourceEnum.VERBLINE)] if task_text else []

    scoped = _scope_lines(lines)
    candidates = _collect_bullets(scoped)
    if len(candidates) < MIN_BULLETS_BEFORE_VERB_FALLBACK:
        candidates.extend(_collect_verb_lines(scoped))

    seen: dict[str, RawTask] = {}
    for task in candidates:
        key = dedup_key(task.text)
        if key in seen or is_fluff(task.text) or is_qualification(task.text):
            continue
        seen[key] = task

    ordered = sorted(seen.values(), key=lambda t: len(t.text), reverse=True)
    return ordered[:MAX_TASKS]
