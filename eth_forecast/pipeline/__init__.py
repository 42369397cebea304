"""
Pipeline module for orchestrating the forecast comparison.

This module provides:
- Full pipeline orchestration
- Report writing
- Forward forecasting on the full series
"""

from .orchestrator import Pipeline
from .report import ReportWriter

__all__ = ["Pipeline", "ReportWriter"]
