"""
Parameter models for oPOSSUM.
"""

from .schemas import AnalysisParams, ResultListParams

__all__ = [
    "AnalysisParams",
    "ResultListParams",
]
