"""
Command-line interface for circuit playground batch operations.

Simulate, validate, export and plot saved circuits without any UI.

Usage::

    python -m cli simulate circuit.json
    python -m cli simulate circuit.json --format csv --output readings.csv
    python -m cli validate circuit.json
    python -m cli export circuit.json --format xlsx --output readings.xlsx
    python -m cli plot circuit.json --output readings.png
    python -m cli batch circuits/ --output-dir results/
    python -m cli repl
    python -m cli repl --load circuit.json
"""

import argparse
import glob
import json
import logging
import sys
from pathlib import Path

from controllers.circuit_simulator import CircuitSimulator
from controllers.file_controller import read_circuit_file
from models.circuit import CircuitModel
from simulation.assistant_context import build_assistant_context, describe_circuit
from simulation.csv_exporter import export_readings
from simulation.settings import SettingsManager, SimulationSettings
from simulation.topology import find_closed_loops


def try_load_circuit(filepath: str) -> tuple[CircuitModel | None, str]:
    """Load and validate a circuit JSON file without exiting.

    Returns:
        (model, "") on success, or (None, error_message) on failure.
    """
    path = Path(filepath)
    if not path.exists():
        return None, f"file not found: {filepath}"

    try:
        return read_circuit_file(path), ""
    except json.JSONDecodeError as e:
        return None, f"invalid JSON in {filepath}: {e}"
    except ValueError as e:
        return None, f"invalid circuit file: {e}"
    except OSError as e:
        return None, f"cannot read {filepath}: {e}"


def load_circuit(filepath: str) -> CircuitModel:
    """Load and validate a circuit JSON file.

    Raises:
        SystemExit: On file read or validation errors.
    """
    model, error = try_load_circuit(filepath)
    if model is None:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)
    return model


def _settings(args: argparse.Namespace) -> SimulationSettings:
    path = getattr(args, "settings", None)
    if path:
        return SettingsManager(Path(path)).settings
    return SimulationSettings()


def _simulate(args: argparse.Namespace) -> CircuitSimulator:
    return CircuitSimulator(load_circuit(args.circuit), _settings(args))


def _emit(text: str, output, label: str) -> None:
    if output:
        Path(output).write_text(text)
        print(f"{label} written to {output}", file=sys.stderr)
    else:
        print(text)


def _format_result(sim: CircuitSimulator, fmt: str, circuit_name: str = "") -> str:
    """Format a simulated circuit as text."""
    if fmt == "csv":
        return export_readings(sim.get_state(), sim.get_semantics(), circuit_name)
    return _result_to_json(sim)


def _result_to_json(sim: CircuitSimulator) -> str:
    semantics = sim.get_semantics()
    output = {
        "semantics": semantics.to_dict(),
        "assistant_context": build_assistant_context(semantics).to_dict(),
        "closed_loops": find_closed_loops(sim.model),
        "state": sim.get_state(),
    }
    return json.dumps(output, indent=2)


def cmd_simulate(args: argparse.Namespace) -> int:
    """Recompute a circuit and output its readings."""
    sim = _simulate(args)
    _emit(_format_result(sim, args.format, Path(args.circuit).stem), args.output, "Results")
    return 0


def collect_warnings(sim: CircuitSimulator) -> list[str]:
    """Non-fatal findings worth reporting on an otherwise valid circuit."""
    warnings = []
    model = sim.model
    semantics = sim.get_semantics()
    for handle in semantics.voltage_conflicts:
        warnings.append(f"node n{handle} is driven to different voltages by more than one battery")
    orphans = model.orphaned_nodes()
    if orphans:
        warnings.append(f"{len(orphans)} node(s) are not used by any component or wire")
    if not model.components_of_type("battery"):
        warnings.append("circuit has no battery")
    for battery_id, closed in find_closed_loops(model).items():
        if not closed:
            warnings.append(f"{battery_id} has no closed loop between its terminals")
    for component_id in semantics.component_failure:
        warnings.append(f"{component_id} is blown")
    return warnings


def cmd_validate(args: argparse.Namespace) -> int:
    """Check a circuit file and report non-fatal issues."""
    sim = _simulate(args)
    print(f"Circuit is valid: {args.circuit}")
    for warning in collect_warnings(sim):
        print(f"  Warning: {warning}")
    print(f"  {describe_circuit(sim.get_semantics())}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export a circuit or its readings in the specified format."""
    fmt = args.format
    sim = _simulate(args)
    name = Path(args.circuit).stem

    if fmt == "json":
        text = json.dumps(sim.model.to_dict(include_readings=args.readings), indent=2)
        _emit(text, args.output, "JSON")
        return 0

    if fmt == "csv":
        _emit(export_readings(sim.get_state(), sim.get_semantics(), name), args.output, "CSV")
        return 0

    if fmt == "xlsx":
        if not args.output:
            print("Error: --output is required for xlsx export", file=sys.stderr)
            return 1
        from simulation.excel_exporter import export_to_excel

        export_to_excel(sim.get_state(), sim.get_semantics(), args.output, name)
        print(f"Workbook written to {args.output}", file=sys.stderr)
        return 0

    print(f"Error: unsupported export format '{fmt}'", file=sys.stderr)
    print("Supported formats: json, csv, xlsx", file=sys.stderr)
    return 1


def cmd_plot(args: argparse.Namespace) -> int:
    """Save a bar chart of component currents and node voltages."""
    from simulation.readings_plot import save_readings_png

    sim = _simulate(args)
    save_readings_png(sim.get_state(), args.output, title=args.title or Path(args.circuit).stem)
    print(f"Plot written to {args.output}", file=sys.stderr)
    return 0


def cmd_batch(args: argparse.Namespace) -> int:
    """Recompute multiple circuit files and print a summary table."""
    pattern = args.path
    path = Path(pattern)
    if path.is_dir():
        files = sorted(path.glob("*.json"))
    elif "*" in pattern or "?" in pattern:
        files = sorted(Path(p) for p in glob.glob(pattern))
    else:
        print(f"Error: {pattern} is not a directory or glob pattern", file=sys.stderr)
        return 1

    if not files:
        print(f"No .json circuit files found matching: {pattern}", file=sys.stderr)
        return 1

    output_dir = None
    if args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    settings = _settings(args)
    results_summary = []
    any_failed = False

    for filepath in files:
        name = filepath.stem
        model, error = try_load_circuit(str(filepath))

        if model is None:
            results_summary.append({"file": filepath.name, "status": "LOAD_ERROR", "error": error})
            any_failed = True
            if args.fail_fast:
                break
            continue

        sim = CircuitSimulator(model, settings)
        semantics = sim.get_semantics()
        results_summary.append(
            {
                "file": filepath.name,
                "status": "OK",
                "details": f"risk={semantics.safety_risk_level} {' '.join(semantics.active_states())}",
            }
        )

        if output_dir:
            ext = "csv" if args.format == "csv" else "json"
            out_path = output_dir / f"{name}.{ext}"
            out_path.write_text(_format_result(sim, args.format, name))

    print(f"\n{'File':<40} {'Status':<12} {'Details'}")
    print("-" * 70)
    for entry in results_summary:
        details = entry.get("details", entry.get("error", ""))
        print(f"{entry['file']:<40} {entry['status']:<12} {details}")

    total = len(results_summary)
    passed = sum(1 for e in results_summary if e["status"] == "OK")
    print(f"\n{passed}/{total} succeeded, {total - passed} failed")

    return 1 if any_failed else 0


REPL_BANNER = """\
Circuit Playground Interactive REPL
===================================

Available objects:
  Circuit          - create, edit and simulate circuits
  COMPONENT_TYPES  - list of all supported component types

Quick start:
  c = Circuit()
  c.add("battery", voltage=9)
  c.add("bulb")
  c.wire("B1", "left", "LP1", "left")
  c.wire("LP1", "right", "B1", "right")
  c.current("LP1")
  c.semantics()
"""


def build_repl_namespace(load_path: str | None = None) -> dict:
    """Build the namespace dict for the interactive REPL.

    Args:
        load_path: Optional path to a circuit JSON file to pre-load.
    """
    from models.component import COMPONENT_TYPES
    from scripting.circuit import Circuit

    namespace = {
        "Circuit": Circuit,
        "COMPONENT_TYPES": COMPONENT_TYPES,
    }

    if load_path:
        model, error = try_load_circuit(load_path)
        if model is None:
            print(f"Warning: could not load {load_path}: {error}", file=sys.stderr)
        else:
            namespace["circuit"] = Circuit(model)
            print(f"Loaded circuit from {load_path} as 'circuit'", file=sys.stderr)

    return namespace


def cmd_repl(args: argparse.Namespace) -> int:
    """Launch an interactive Python REPL with the scripting API."""
    namespace = build_repl_namespace(getattr(args, "load", None))

    try:
        from IPython import start_ipython

        start_ipython(argv=[], user_ns=namespace, display_banner=False)
        return 0
    except ImportError:
        pass

    import code

    code.interact(banner=REPL_BANNER, local=namespace)
    return 0


def _add_circuit_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("circuit", help="Path to circuit JSON file")
    parser.add_argument("--settings", help="JSON file with simulation threshold overrides")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="circuit-playground",
        description="Circuit playground batch operations: simulate, validate, export and plot saved circuits.",
    )
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Log more (-v info, -vv debug)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # simulate
    sim_parser = subparsers.add_parser("simulate", help="Recompute a circuit and output its readings")
    _add_circuit_args(sim_parser)
    sim_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Output format (default: json)")
    sim_parser.add_argument("--output", "-o", help="Write results to file instead of stdout")

    # validate
    val_parser = subparsers.add_parser("validate", help="Check a circuit file and report issues")
    _add_circuit_args(val_parser)

    # export
    exp_parser = subparsers.add_parser("export", help="Export a circuit or its readings")
    _add_circuit_args(exp_parser)
    exp_parser.add_argument(
        "--format", "-f", choices=["json", "csv", "xlsx"], default="json", help="Export format (default: json)"
    )
    exp_parser.add_argument("--readings", action="store_true", help="Include computed readings in JSON output")
    exp_parser.add_argument("--output", "-o", help="Write output to file instead of stdout")

    # plot
    plot_parser = subparsers.add_parser("plot", help="Save a PNG chart of currents and voltages")
    _add_circuit_args(plot_parser)
    plot_parser.add_argument("--output", "-o", required=True, help="PNG file to write")
    plot_parser.add_argument("--title", help="Chart title (default: circuit file name)")

    # batch
    batch_parser = subparsers.add_parser("batch", help="Recompute multiple circuit files")
    batch_parser.add_argument("path", help="Directory or glob pattern matching circuit JSON files")
    batch_parser.add_argument("--settings", help="JSON file with simulation threshold overrides")
    batch_parser.add_argument(
        "--format", choices=["json", "csv"], default="json", help="Output format for per-file results (default: json)"
    )
    batch_parser.add_argument("--output-dir", help="Write per-file results to this directory")
    batch_parser.add_argument("--fail-fast", action="store_true", help="Stop on first error")

    # repl
    repl_parser = subparsers.add_parser("repl", help="Launch interactive Python REPL with scripting API")
    repl_parser.add_argument("--load", help="Pre-load a circuit JSON file as 'circuit' variable")

    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv=None) -> int:
    """CLI entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    handlers = {
        "simulate": cmd_simulate,
        "validate": cmd_validate,
        "export": cmd_export,
        "plot": cmd_plot,
        "batch": cmd_batch,
        "repl": cmd_repl,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
