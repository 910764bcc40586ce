"""
simulation/excel_exporter.py

Export simulation readings to Excel (.xlsx) format.
"""

from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .csv_exporter import COMPONENT_COLUMNS, component_rows, node_rows

# Highlight for rows describing a blown component
_BLOWN_FILL = PatternFill(start_color="F4CCCC", end_color="F4CCCC", fill_type="solid")


def _add_summary_sheet(wb, semantics, circuit_name=""):
    """Add a Summary sheet with metadata and the semantic state."""
    ws = wb.active
    ws.title = "Summary"
    ws.append(["Circuit Readings Summary"])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([])
    ws.append(["Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    if circuit_name:
        ws.append(["Circuit", circuit_name])
    ws.append([])
    for key, value in semantics.to_dict().items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        ws.append([key, value])
    for row in ws.iter_rows(min_row=3, max_col=1):
        row[0].font = Font(bold=True)
    ws.column_dimensions["A"].width = 28
    ws.column_dimensions["B"].width = 30
    return ws


def _style_header_row(ws, row_num=1):
    """Apply header styling to the first row of a worksheet."""
    header_fill = PatternFill(
        start_color="4472C4", end_color="4472C4", fill_type="solid"
    )
    header_font = Font(bold=True, color="FFFFFF")
    for cell in ws[row_num]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")


def _set_widths(ws, count, width):
    for i in range(1, count + 1):
        ws.column_dimensions[get_column_letter(i)].width = width


def export_to_excel(state, semantics, filepath, circuit_name=""):
    """Export readings to an Excel workbook.

    Sheets: Summary (semantic state), Components, Nodes.

    Args:
        state: dict from CircuitSimulator.get_state()
        semantics: SemanticState for the same pass
        filepath: path to write the .xlsx file
        circuit_name: optional circuit filename for metadata
    """
    wb = Workbook()
    _add_summary_sheet(wb, semantics, circuit_name)

    ws = wb.create_sheet("Components")
    ws.append(COMPONENT_COLUMNS)
    _style_header_row(ws)
    for row in component_rows(state):
        ws.append(row)
        if row[2] != "normal":
            for cell in ws[ws.max_row]:
                cell.fill = _BLOWN_FILL
    _set_widths(ws, len(COMPONENT_COLUMNS), 14)

    ws = wb.create_sheet("Nodes")
    ws.append(["Node", "Voltage (V)", "Current (A)"])
    _style_header_row(ws)
    for row in node_rows(state):
        ws.append(row)
    _set_widths(ws, 3, 15)

    wb.save(filepath)
