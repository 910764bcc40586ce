"""Tests for CSV export functionality."""

import csv
import io

import pytest
from simulation.csv_exporter import (
    COMPONENT_COLUMNS,
    component_rows,
    export_component_readings,
    export_node_voltages,
    export_readings,
    node_rows,
    write_csv,
)


def _data_rows(content):
    rows = list(csv.reader(io.StringIO(content)))
    return [row for row in rows if row and not row[0].startswith("#")]


class TestRows:
    def test_component_rows(self, bulb_circuit):
        rows = component_rows(bulb_circuit.get_state())
        assert [row[0] for row in rows] == ["B1", "LP1"]
        lamp = rows[1]
        assert lamp[1] == "bulb"
        assert lamp[2] == "normal"
        assert lamp[3] == pytest.approx(0.0375)
        assert lamp[5] is True

    def test_node_rows_sorted(self, bulb_circuit):
        rows = node_rows(bulb_circuit.get_state())
        assert [row[0] for row in rows] == [0, 1, 2, 3]
        assert [row[1] for row in rows] == [9.0, 0.0, 9.0, 0.0]

    def test_empty_state(self):
        assert component_rows({}) == []
        assert node_rows({}) == []


class TestExportComponentReadings:
    def test_header_and_rows(self, bulb_circuit):
        content = export_component_readings(bulb_circuit.get_state(), circuit_name="bulb.json")
        assert "# Export,Component Readings" in content
        assert "bulb.json" in content
        rows = _data_rows(content)
        assert rows[0] == COMPONENT_COLUMNS
        assert rows[2][0] == "LP1"

    def test_no_circuit_name_line(self, bulb_circuit):
        content = export_component_readings(bulb_circuit.get_state())
        assert "# Circuit" not in content


class TestExportNodeVoltages:
    def test_rows(self, bulb_circuit):
        rows = _data_rows(export_node_voltages(bulb_circuit.get_state()))
        assert rows[0] == ["Node", "Voltage (V)", "Current (A)"]
        assert rows[1][:2] == ["0", "9.0"]


class TestExportReadings:
    def test_sections_in_order(self, bulb_circuit):
        content = export_readings(bulb_circuit.get_state(), bulb_circuit.get_semantics())
        rows = _data_rows(content)
        headers = [row[0] for row in rows]
        assert headers.index("Condition") < headers.index("ID") < headers.index("Node")

    def test_semantic_values(self, bulb_circuit):
        bulb_circuit.connect_terminals("B1", 0, "B1", 1)
        rows = _data_rows(export_readings(bulb_circuit.get_state(), bulb_circuit.get_semantics()))
        values = {row[0]: row[1] for row in rows if len(row) == 2}
        assert values["short_circuit"] == "True"
        assert values["safety_risk_level"] == "high"


class TestWriteCsv:
    def test_writes_file(self, tmp_path, bulb_circuit):
        path = tmp_path / "readings.csv"
        write_csv(export_component_readings(bulb_circuit.get_state()), path)
        assert "LP1" in path.read_text()
