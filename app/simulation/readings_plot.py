"""Bar charts of component currents and node voltages.

Pure Python module with no UI dependencies. Matplotlib is used only for
figure creation and is imported lazily.
"""

from __future__ import annotations

from .csv_exporter import node_rows

_NORMAL_COLOR = "#4CAF50"
_BLOWN_COLOR = "#E53935"


def compute_current_bars(state: dict) -> tuple[list[str], list[float], list[str]]:
    """Compute labels, heights and colors for the component current chart.

    Blown components are drawn in red.
    """
    labels, values, colors = [], [], []
    for comp in state.get("components", []):
        labels.append(comp["id"])
        values.append(comp.get("output", {}).get("current", 0.0))
        colors.append(_NORMAL_COLOR if comp.get("health", "normal") == "normal" else _BLOWN_COLOR)
    return labels, values, colors


def create_readings_figure(state: dict, title: str = "Circuit Readings"):
    """Create a matplotlib Figure with two panels: currents and node voltages.

    Args:
        state: dict from CircuitSimulator.get_state().
        title: Figure title.

    Returns:
        matplotlib.figure.Figure
    """
    import matplotlib.figure as mpl_figure

    labels, currents, colors = compute_current_bars(state)
    nodes = node_rows(state)

    fig = mpl_figure.Figure(figsize=(8, 3.5), dpi=100)
    ax_current, ax_voltage = fig.subplots(1, 2)

    positions = range(len(labels))
    ax_current.bar(positions, currents, color=colors, width=0.8)
    ax_current.set_xticks(list(positions))
    ax_current.set_xticklabels(labels, rotation=45, ha="right", fontsize=8)
    ax_current.set_ylabel("Current (A)")
    ax_current.set_title("Component Currents")

    positions = range(len(nodes))
    ax_voltage.bar(positions, [row[1] for row in nodes], color="#1E88E5", width=0.8)
    ax_voltage.set_xticks(list(positions))
    ax_voltage.set_xticklabels([f"n{row[0]}" for row in nodes], fontsize=8)
    ax_voltage.set_ylabel("Voltage (V)")
    ax_voltage.set_title("Node Voltages")
    ax_voltage.axhline(0.0, color="black", linewidth=0.5)

    fig.suptitle(title)
    fig.tight_layout()
    return fig


def save_readings_png(state: dict, filepath: str, title: str = "Circuit Readings") -> None:
    """Save the readings chart as a PNG image."""
    fig = create_readings_figure(state, title)
    fig.savefig(filepath, dpi=150, bbox_inches="tight")
