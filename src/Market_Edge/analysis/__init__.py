"""Consensus scoring over technical indicators.

Re-exports all public functions so consumers can import directly:
    from Market_Edge.analysis import calculate_stacked_edge
"""

from Market_Edge.analysis.stacked_edge import MIN_BARS, bars_to_frame, calculate_stacked_edge

__all__ = [
    "MIN_BARS",
    "bars_to_frame",
    "calculate_stacked_edge",
]
