"""Cycle KPI engine for livestock farms.

Computes revenue, costs, profit/loss, feed conversion, daily gains and
per-area metrics for production cycles (Durchgänge) in which animal groups
move between barns, pens and area groups over time.

Subpackages:
- models: Pydantic input records (cycles, consumption, transactions, settings)
- calculations: Pure KPI calculators and result records
- analysis: Multi-cycle evaluation and consumption pivots
- validation: Data-quality checks for cycles
- exporters: Excel reports
"""

__version__ = "1.0.0"
