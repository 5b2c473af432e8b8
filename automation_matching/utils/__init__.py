"""Utility functions for the automation matching pipeline."""

from automation_matching.utils.numbers import clamp, round_half_up

__all__ = [
    "clamp",
    "round_half_up",
]
