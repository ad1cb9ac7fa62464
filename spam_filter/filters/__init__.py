"""Scoring callbacks that can be registered with the filter engine."""

from spam_filter.filters.base import CustomFilter
from spam_filter.filters.witness_filters import HighWitnessFilter, LargeWitnessRatioFilter

__all__ = [
    "CustomFilter",
    "HighWitnessFilter",
    "LargeWitnessRatioFilter",
]
