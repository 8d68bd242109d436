"""
utils/export.py — Excel export of the garden calendar using openpyxl.

One sheet, one row per activity, styled header row.
Columns: Month, Emphasis, Type, Crop, Action, Timing, Priority.
"""

from io import BytesIO

import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter


# Priority colors for the Priority column
PRIORITY_FILLS = {
    'high': PatternFill(start_color='D32F2F', end_color='D32F2F', fill_type='solid'),
    'medium': PatternFill(start_color='FFB300', end_color='FFB300', fill_type='solid'),
    'low': PatternFill(start_color='4CAF50', end_color='4CAF50', fill_type='solid'),
}

HEADER_FONT = Font(name='Calibri', bold=True, color='FFFFFF', size=11)
HEADER_FILL = PatternFill(start_color='2E7D32', end_color='2E7D32', fill_type='solid')
HEADER_ALIGNMENT = Alignment(horizontal='center', vertical='center', wrap_text=True)
HEADER_BORDER = Border(
    bottom=Side(style='thin', color='1B5E20'),
    right=Side(style='thin', color='E2E8F0'),
)
CELL_BORDER = Border(
    bottom=Side(style='thin', color='E2E8F0'),
    right=Side(style='thin', color='E2E8F0'),
)

COLUMNS = [
    ('Month', 12),
    ('Emphasis', 34),
    ('Type', 18),
    ('Crop', 20),
    ('Action', 60),
    ('Timing', 36),
    ('Priority', 10),
]


def _build_sheet(ws, calendar):
    """Populate a worksheet with calendar rows and styled header."""
    for col_idx, (col_name, width) in enumerate(COLUMNS, 1):
        cell = ws.cell(row=1, column=col_idx, value=col_name)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = HEADER_BORDER
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    row_idx = 2
    for entry in calendar:
        for activity in entry['activities']:
            values = [
                entry['month'],
                entry['emphasis'],
                activity.get('type', ''),
                activity.get('crop', ''),
                activity.get('action', ''),
                activity.get('timing', ''),
                activity.get('priority', ''),
            ]
            for col_idx, value in enumerate(values, 1):
                ws.cell(row=row_idx, column=col_idx, value=value).border = CELL_BORDER

            priority_cell = ws.cell(row=row_idx, column=len(COLUMNS))
            if priority_cell.value in PRIORITY_FILLS:
                priority_cell.fill = PRIORITY_FILLS[priority_cell.value]
                priority_cell.font = Font(color='FFFFFF', bold=True)
            row_idx += 1

    ws.freeze_panes = 'A2'


def generate_calendar_excel(garden_id, calendar):
    """Generate a calendar workbook for one garden.

    Returns:
        (BytesIO buffer, filename)
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = 'Calendar'

    _build_sheet(ws, calendar)

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    filename = f"garden_calendar_{garden_id}.xlsx"
    return buffer, filename
