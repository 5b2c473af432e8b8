"""Ranking of catalog artifacts against job tasks."""

from automation_matching.matching.engine import (
    MatchOptions,
    MatchResult,
    MatchTask,
    estimate_setup_cost,
    estimate_time_savings,
    find_best_overall_workflow,
    match_workflows,
    match_workflows_to_subtasks,
)

__all__ = [
    "MatchTask",
    "MatchOptions",
    "MatchResult",
    "match_workflows",
    "match_workflows_to_subtasks",
    "find_best_overall_workflow",
    "estimate_time_savings",
    "estimate_setup_cost",
]
