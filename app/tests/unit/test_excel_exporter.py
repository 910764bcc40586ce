"""Tests for Excel (.xlsx) export of simulation readings."""

import pytest

openpyxl = pytest.importorskip("openpyxl")

from simulation.excel_exporter import export_to_excel  # noqa: E402


class TestExportToExcel:
    def test_sheets(self, tmp_path, bulb_circuit):
        path = tmp_path / "readings.xlsx"
        export_to_excel(bulb_circuit.get_state(), bulb_circuit.get_semantics(), path, "bulb.json")
        wb = openpyxl.load_workbook(path)
        assert wb.sheetnames == ["Summary", "Components", "Nodes"]

    def test_summary_contents(self, tmp_path, bulb_circuit):
        path = tmp_path / "readings.xlsx"
        export_to_excel(bulb_circuit.get_state(), bulb_circuit.get_semantics(), path, "bulb.json")
        ws = openpyxl.load_workbook(path)["Summary"]
        values = {row[0]: row[1] for row in ws.iter_rows(values_only=True) if row[0]}
        assert values["Circuit"] == "bulb.json"
        assert values["safety_risk_level"] == "none"
        assert values["power_flow_active"] is True

    def test_component_rows(self, tmp_path, bulb_circuit):
        path = tmp_path / "readings.xlsx"
        export_to_excel(bulb_circuit.get_state(), bulb_circuit.get_semantics(), path)
        ws = openpyxl.load_workbook(path)["Components"]
        assert ws["A1"].value == "ID"
        assert ws["A1"].font.bold
        assert ws["A3"].value == "LP1"
        assert ws["D3"].value == pytest.approx(0.0375)

    def test_blown_rows_highlighted(self, tmp_path, simulator):
        simulator.add_component("battery")
        simulator.add_component("motor")
        simulator.connect_terminals("B1", 0, "M1", 0)
        path = tmp_path / "readings.xlsx"
        export_to_excel(simulator.get_state(), simulator.get_semantics(), path)
        ws = openpyxl.load_workbook(path)["Components"]
        assert ws["C3"].value == "blown"
        assert ws["A3"].fill.start_color.rgb.endswith("F4CCCC")
        assert not ws["A2"].fill.start_color.rgb.endswith("F4CCCC")

    def test_nodes_sheet(self, tmp_path, bulb_circuit):
        path = tmp_path / "readings.xlsx"
        export_to_excel(bulb_circuit.get_state(), bulb_circuit.get_semantics(), path)
        ws = openpyxl.load_workbook(path)["Nodes"]
        assert [c.value for c in ws[1]] == ["Node", "Voltage (V)", "Current (A)"]
        assert ws.max_row == 5
