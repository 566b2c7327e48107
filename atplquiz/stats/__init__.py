from .stats import Signals, accuracy_percent, compute_signals, format_elapsed, format_streak, format_summary

__all__ = [
    "Signals",
    "accuracy_percent",
    "compute_signals",
    "format_elapsed",
    "format_streak",
    "format_summary",
]
