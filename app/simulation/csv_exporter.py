"""
simulation/csv_exporter.py

Export simulation readings to CSV format.
Takes the plain-data snapshot from CircuitSimulator.get_state(), so it
works equally on live simulators and on saved state dumps.
"""

import csv
import io
from datetime import datetime

COMPONENT_COLUMNS = [
    "ID",
    "Type",
    "Health",
    "Current (A)",
    "Voltage (V)",
    "Glowing",
    "Spinning",
    "Charging",
    "Blown",
]


def _write_header(writer, title, circuit_name):
    writer.writerow(["# Export", title])
    writer.writerow(["# Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    if circuit_name:
        writer.writerow(["# Circuit", circuit_name])
    writer.writerow([])


def component_rows(state):
    """Flatten each component of a state snapshot into one row."""
    rows = []
    for comp in state.get("components", []):
        output = comp.get("output", {})
        rows.append([
            comp["id"],
            comp["type"],
            comp.get("health", "normal"),
            output.get("current", 0.0),
            output.get("voltage", ""),
            output.get("glowing", False),
            output.get("spinning", False),
            output.get("charging", False),
            output.get("blown", False),
        ])
    return rows


def node_rows(state):
    """Return [handle, voltage, current] rows ordered by handle."""
    nodes = sorted(state.get("nodes", []), key=lambda n: n["handle"])
    return [[n["handle"], n.get("voltage", 0.0), n.get("current", 0.0)] for n in nodes]


def export_component_readings(state, circuit_name=""):
    """
    Export per-component readings to a CSV string.

    Args:
        state: dict from CircuitSimulator.get_state()
        circuit_name: optional circuit filename

    Returns:
        str: CSV content
    """
    output = io.StringIO()
    writer = csv.writer(output)
    _write_header(writer, "Component Readings", circuit_name)
    writer.writerow(COMPONENT_COLUMNS)
    writer.writerows(component_rows(state))
    return output.getvalue()


def export_node_voltages(state, circuit_name=""):
    """Export node voltages and currents to a CSV string."""
    output = io.StringIO()
    writer = csv.writer(output)
    _write_header(writer, "Node Voltages", circuit_name)
    writer.writerow(["Node", "Voltage (V)", "Current (A)"])
    writer.writerows(node_rows(state))
    return output.getvalue()


def export_readings(state, semantics, circuit_name=""):
    """
    Export a full report: semantic summary, components, then nodes.

    Args:
        state: dict from CircuitSimulator.get_state()
        semantics: SemanticState for the same pass
        circuit_name: optional circuit filename

    Returns:
        str: CSV content
    """
    output = io.StringIO()
    writer = csv.writer(output)
    _write_header(writer, "Circuit Readings", circuit_name)

    writer.writerow(["Condition", "Value"])
    for key, value in semantics.to_dict().items():
        if isinstance(value, list):
            value = " ".join(str(v) for v in value)
        writer.writerow([key, value])
    writer.writerow([])

    writer.writerow(COMPONENT_COLUMNS)
    writer.writerows(component_rows(state))
    writer.writerow([])

    writer.writerow(["Node", "Voltage (V)", "Current (A)"])
    writer.writerows(node_rows(state))
    return output.getvalue()


def write_csv(csv_content, filepath):
    """
    Write CSV content string to a file.

    Args:
        csv_content: str from one of the export_* functions
        filepath: path to write to
    """
    with open(filepath, "w", newline="") as f:
        f.write(csv_content)
