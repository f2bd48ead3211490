"""
Excel exporters for cycle evaluations.

This module provides a formatted Excel report with cycle KPIs,
area metrics and feed components.
"""

from .excel_templates import export_cycle_report

__all__ = [
    'export_cycle_report',
]
