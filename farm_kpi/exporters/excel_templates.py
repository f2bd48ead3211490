"""
Excel export templates for cycle evaluations.

This module provides a formatted Excel report of one cycle with:
1. Cycle KPIs (Kennzahlen)
2. Area and area-group metrics (Bereiche)
3. Feed components (Futterkomponenten)
"""

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side, Alignment
from openpyxl.utils import get_column_letter
from typing import Any, Dict, List, Optional, Sequence, Union
import io
import logging

from farm_kpi.calculations.metrics_breakdown import AreaMetrics, CycleMetrics, FeedComponentSummary
from farm_kpi.models.cycle import Cycle

logger = logging.getLogger(__name__)

# Color constants
HEADER_COLOR = "2E7D32"
ALT_ROW_COLOR = "F5F5F5"
PROFIT_COLOR = "C8E6C9"  # Green
LOSS_COLOR = "FFCDD2"  # Red

CURRENCY_FORMAT = '#,##0.00 "€"'
NUMBER_FORMAT = '#,##0.00'
PERCENT_FORMAT = '0.0"%"'

SUMMARY_SHEET = "Kennzahlen"
AREA_SHEET = "Bereiche"
FEED_SHEET = "Futterkomponenten"


def create_header_style() -> Dict[str, Any]:
    """Create header row style (green background, white text, bold)."""
    thin = Side(style='thin')
    return {
        'font': Font(name='Calibri', size=11, bold=True, color='FFFFFF'),
        'fill': PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type='solid'),
        'alignment': Alignment(horizontal='center', vertical='center', wrap_text=True),
        'border': Border(left=thin, right=thin, top=thin, bottom=thin),
    }


def write_header(worksheet, headers: Sequence[str], row: int = 1):
    """Write a styled header row."""
    style = create_header_style()
    for col_idx, title in enumerate(headers, 1):
        cell = worksheet.cell(row=row, column=col_idx, value=title)
        cell.font = style['font']
        cell.fill = style['fill']
        cell.alignment = style['alignment']
        cell.border = style['border']


def apply_alternating_rows(worksheet, start_row: int, end_row: int, start_col: int = 1, end_col: int = 10):
    """Apply alternating row colors (white / light gray)."""
    fill = PatternFill(start_color=ALT_ROW_COLOR, end_color=ALT_ROW_COLOR, fill_type='solid')
    for row_idx in range(start_row, end_row + 1):
        if (row_idx - start_row) % 2 == 1:
            for col_idx in range(start_col, end_col + 1):
                worksheet.cell(row=row_idx, column=col_idx).fill = fill


def format_column(worksheet, column: int, start_row: int, end_row: int, number_format: str):
    """Apply a number format to a column range."""
    for row_idx in range(start_row, end_row + 1):
        worksheet.cell(row=row_idx, column=column).number_format = number_format


def auto_fit_columns(worksheet, max_width: int = 50):
    """Auto-fit column widths based on content."""
    for column in worksheet.columns:
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        column_letter = get_column_letter(column[0].column)
        worksheet.column_dimensions[column_letter].width = min(max_length + 2, max_width)


def _summary_rows(cycle: Cycle, metrics: CycleMetrics) -> List[List[Any]]:
    return [
        ['Durchgang', cycle.name or cycle.id, None],
        ['Start', cycle.start_date, None],
        ['Ende', cycle.end_date if cycle.end_date else 'laufend', None],
        ['Dauer (Tage)', metrics.cycle_duration, '#,##0'],
        ['Tiere', metrics.total_animals, '#,##0'],
        ['Tiere mit Gewichten', metrics.animals_with_weights, '#,##0'],
        ['Startgewicht (kg)', metrics.start_weight, NUMBER_FORMAT],
        ['Endgewicht (kg)', metrics.average_weight, NUMBER_FORMAT],
        ['Zunahme (kg/Tier)', metrics.weight_gain, NUMBER_FORMAT],
        ['Tageszunahme (g)', metrics.daily_gain_grams, '#,##0'],
        ['Nettotageszunahme (g)', metrics.net_daily_gain_grams, '#,##0'],
        ['Futterverwertung', metrics.feed_conversion_ratio, '0.000'],
        ['Verluste (%)', metrics.mortality_rate, PERCENT_FORMAT],
        ['Futtermenge', metrics.total_feed_quantity, NUMBER_FORMAT],
        ['Futterkosten Verbrauch', metrics.consumption_feed_cost, CURRENCY_FORMAT],
        ['Futterkosten Buchungen', metrics.feed_category_transaction_costs, CURRENCY_FORMAT],
        ['Futterkosten gesamt', metrics.total_feed_cost, CURRENCY_FORMAT],
        ['Futterkosten je Tier', metrics.feed_cost_per_animal, CURRENCY_FORMAT],
        ['Futterkosten je kg Zunahme', metrics.feed_cost_per_kg, CURRENCY_FORMAT],
        ['Futterkosten je Tag', metrics.daily_feed_cost, CURRENCY_FORMAT],
        ['Tierankauf', metrics.animal_purchase_cost, CURRENCY_FORMAT],
        ['Sonstige Kosten', metrics.additional_costs, CURRENCY_FORMAT],
        ['Kosten gesamt', metrics.total_costs, CURRENCY_FORMAT],
        ['Tierverkauf', metrics.animal_sales_revenue, CURRENCY_FORMAT],
        ['Sonstige Erlöse', metrics.additional_income, CURRENCY_FORMAT],
        ['Erlöse gesamt', metrics.total_revenue, CURRENCY_FORMAT],
        ['Gewinn/Verlust', metrics.profit_loss, CURRENCY_FORMAT],
        ['Marge (%)', metrics.profit_margin, PERCENT_FORMAT],
    ]


def _write_summary_sheet(worksheet, cycle: Cycle, metrics: CycleMetrics):
    write_header(worksheet, ['Kennzahl', 'Wert'])
    rows = _summary_rows(cycle, metrics)
    for row_idx, (label, value, number_format) in enumerate(rows, 2):
        worksheet.cell(row=row_idx, column=1, value=label)
        cell = worksheet.cell(row=row_idx, column=2, value=value)
        if number_format:
            cell.number_format = number_format

    result_row = len(rows)  # 'Gewinn/Verlust' is second to last
    color = PROFIT_COLOR if metrics.profit_loss >= 0 else LOSS_COLOR
    for col_idx in (1, 2):
        cell = worksheet.cell(row=result_row, column=col_idx)
        cell.font = Font(name='Calibri', size=11, bold=True)
        cell.fill = PatternFill(start_color=color, end_color=color, fill_type='solid')

    auto_fit_columns(worksheet)


def _write_area_sheet(worksheet, area_metrics: Sequence[AreaMetrics]):
    headers = [
        'Bereich', 'Typ', 'Tiere', 'Tierart', 'Futtermenge', 'Futterkosten',
        'Anteil (%)', 'Futter je Tier', 'Umlage je Tier', 'Kosten je Tier',
        'Futter je Tag', 'Futter je kg', 'Startgewicht', 'Endgewicht',
        'Gewichtsquelle', 'G/V direkt je Tier', 'G/V voll je Tier',
    ]
    write_header(worksheet, headers)

    for row_idx, area in enumerate(area_metrics, 2):
        values = [
            area.area_name,
            'Gruppe' if area.is_group else 'Bereich',
            area.animal_count,
            area.animal_type,
            area.total_feed_quantity,
            area.total_feed_cost,
            area.percentage_of_total,
            area.feed_cost_per_animal,
            area.allocated_cost_per_animal,
            area.total_cost_per_animal,
            area.feed_cost_per_day,
            area.feed_cost_per_kg,
            area.start_weight,
            area.end_weight,
            area.weight_source_label or area.weight_source,
            area.profit_loss_direct_per_animal,
            area.profit_loss_full_per_animal,
        ]
        for col_idx, value in enumerate(values, 1):
            worksheet.cell(row=row_idx, column=col_idx, value=value)

    last_row = len(area_metrics) + 1
    if last_row > 1:
        for col in (6, 8, 9, 10, 11, 12, 16, 17):
            format_column(worksheet, col, 2, last_row, CURRENCY_FORMAT)
        for col in (5, 13, 14):
            format_column(worksheet, col, 2, last_row, NUMBER_FORMAT)
        format_column(worksheet, 7, 2, last_row, PERCENT_FORMAT)
        apply_alternating_rows(worksheet, 2, last_row, end_col=len(headers))

    worksheet.freeze_panes = 'B2'
    auto_fit_columns(worksheet)


def _write_feed_sheet(worksheet, feed_components: Sequence[FeedComponentSummary]):
    headers = [
        'Futtermittel', 'Einheit', 'Menge', 'Kosten', 'Ø Preis', 'Anteil (%)',
        'Menge je Tag', 'Menge je Tier und Tag', 'Menge je Tier',
    ]
    write_header(worksheet, headers)

    for row_idx, component in enumerate(feed_components, 2):
        values = [
            component.feed_type_name,
            component.unit,
            component.total_quantity,
            component.total_cost,
            component.weighted_avg_price,
            component.percentage_of_total,
            component.daily_consumption,
            component.quantity_per_animal_per_day,
            component.quantity_per_animal,
        ]
        for col_idx, value in enumerate(values, 1):
            worksheet.cell(row=row_idx, column=col_idx, value=value)

    last_row = len(feed_components) + 1
    if last_row > 1:
        format_column(worksheet, 4, 2, last_row, CURRENCY_FORMAT)
        format_column(worksheet, 5, 2, last_row, '#,##0.0000')
        format_column(worksheet, 6, 2, last_row, PERCENT_FORMAT)
        for col in (3, 7, 8, 9):
            format_column(worksheet, col, 2, last_row, NUMBER_FORMAT)

        total_row = last_row + 1
        worksheet.cell(row=total_row, column=1, value='Gesamt')
        for col in (3, 4):
            col_letter = get_column_letter(col)
            worksheet.cell(row=total_row, column=col, value=f"=SUM({col_letter}2:{col_letter}{last_row})")
        for col in range(1, len(headers) + 1):
            cell = worksheet.cell(row=total_row, column=col)
            cell.font = Font(name='Calibri', size=10, bold=True)
            cell.fill = PatternFill(start_color=ALT_ROW_COLOR, end_color=ALT_ROW_COLOR, fill_type='solid')
        worksheet.cell(row=total_row, column=4).number_format = CURRENCY_FORMAT

    auto_fit_columns(worksheet)


def export_cycle_report(
    output_path: Optional[str],
    cycle: Cycle,
    metrics: CycleMetrics,
    area_metrics: Sequence[AreaMetrics] = (),
    feed_components: Sequence[FeedComponentSummary] = ()
) -> Union[str, bytes]:
    """
    Export a cycle evaluation to a formatted Excel workbook.

    Creates 3 sheets:
    1. Kennzahlen - Cycle KPIs
    2. Bereiche - Metrics per area / area group
    3. Futterkomponenten - Consumption per feed type with totals

    Args:
        output_path: Path to save Excel file (None returns the file content)
        cycle: Evaluated cycle
        metrics: Cycle metrics
        area_metrics: Area metrics
        feed_components: Feed component summaries

    Returns:
        Path to created file, or workbook bytes when no path is given
    """
    wb = Workbook()
    wb.remove(wb.active)

    _write_summary_sheet(wb.create_sheet(SUMMARY_SHEET), cycle, metrics)
    _write_area_sheet(wb.create_sheet(AREA_SHEET), list(area_metrics))
    _write_feed_sheet(wb.create_sheet(FEED_SHEET), list(feed_components))

    if output_path is None:
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    wb.save(output_path)
    logger.info(f"Exported cycle {cycle.id} report to {output_path}")
    return output_path
