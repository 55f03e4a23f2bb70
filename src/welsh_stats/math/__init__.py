"""Summary statistics for yearly measure values."""

from .stats import absolute_change, mean, percentage_change, to_numpy  # noqa: F401

__all__ = ["absolute_change", "mean", "percentage_change", "to_numpy"]
