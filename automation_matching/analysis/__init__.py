"""Job-text analysis: task extraction, automation scoring and reporting."""

from automation_matching.analysis.extractor import RawTask, extract_tasks
from automation_matching.analysis.report import AnalysisReport, build_report
from automation_matching.analysis.scorer import ScoredTask, score_task
from automation_matching.analysis.subtasks import Subtask, decompose_task, get_task_domain

__all__ = [
    # Extraction
    "RawTask",
    "extract_tasks",
    # Scoring
    "ScoredTask",
    "score_task",
    # Decomposition
    "Subtask",
    "decompose_task",
    "get_task_domain",
    # Reporting
    "AnalysisReport",
    "build_report",
]
