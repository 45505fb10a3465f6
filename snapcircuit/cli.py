"""
Command-line interface for snapcircuit.

Inspect circuit description files without a host application.

Usage::

    python -m snapcircuit.cli power circuit.json
    python -m snapcircuit.cli power circuit.json --format json
    python -m snapcircuit.cli cycles circuit.json
    python -m snapcircuit.cli validate circuit.json
    python -m snapcircuit.cli replay circuit.json
    python -m snapcircuit.cli repl --load circuit.json
"""

import argparse
import json
import sys

from snapcircuit import __version__
from snapcircuit.controllers.circuit_controller import CircuitController
from snapcircuit.controllers.file_controller import FileController, apply_event, read_circuit_file
from snapcircuit.settings import CircuitSettings, LOG_LEVELS, SettingsStore, configure_logging
from snapcircuit.simulation.power_propagator import cycle_qualifies


def try_load_circuit(filepath: str, settings: CircuitSettings) -> tuple[FileController | None, str]:
    """Load and validate a circuit JSON file without exiting.

    Returns:
        (file_controller, "") on success, or (None, error_message) on failure.
    """
    files = FileController(settings=settings)
    try:
        files.load_circuit(filepath)
    except FileNotFoundError:
        return None, f"file not found: {filepath}"
    except ValueError as e:
        return None, f"invalid circuit file: {e}"
    return files, ""


def load_circuit(filepath: str, settings: CircuitSettings) -> FileController:
    """Load and validate a circuit JSON file.

    Raises:
        SystemExit: On file read or validation errors.
    """
    files, error = try_load_circuit(filepath, settings)
    if files is None:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)
    return files


def _format_power(controller: CircuitController, fmt: str) -> str:
    power = controller.power_map
    if fmt == "json":
        return json.dumps({str(k): v for k, v in power.items()}, indent=2)
    if not power:
        return "(no components)"
    width = max(len(str(cid)) for cid in power)
    lines = []
    for cid, value in power.items():
        component = controller.get_component(cid)
        kind = component.component_type.value if component else "?"
        lines.append(f"{cid:<{width}}  {kind:<8} {'ON' if value else 'off'}")
    return "\n".join(lines)


def cmd_power(args: argparse.Namespace) -> int:
    """Print the power map of a circuit file."""
    files = load_circuit(args.circuit, args.settings)
    if args.with_events:
        files.replay_events()
    print(_format_power(files.controller, args.format))
    return 0


def cmd_cycles(args: argparse.Namespace) -> int:
    """List the cycles of a circuit and whether each one carries power."""
    files = load_circuit(args.circuit, args.settings)
    controller = files.controller
    cycles = controller.find_cycles()
    if not cycles:
        print("No cycles found.")
        return 0
    for cycle in sorted(cycles, key=lambda c: (len(c), tuple(sorted(c)))):
        status = "qualifies" if cycle_qualifies(cycle, controller.model.registry) else "open"
        print(f"{' -> '.join(cycle)} -> {cycle[0]}  [{status}]")
    print(f"\n{len(cycles)} cycle(s)")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a circuit file without loading it into a controller."""
    try:
        data = read_circuit_file(args.circuit)
    except FileNotFoundError:
        print(f"Error: file not found: {args.circuit}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Circuit has errors: {args.circuit}", file=sys.stderr)
        print(f"  - {e}", file=sys.stderr)
        return 1

    print(f"Circuit is valid: {args.circuit}")
    print(
        f"  {len(data.get('components', []))} component(s), "
        f"{len(data.get('connections', []))} connection(s), "
        f"{len(data.get('events', []))} event(s)"
    )
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    """Replay the file's events, printing every power change a listener receives."""
    files = load_circuit(args.circuit, args.settings)
    controller = files.controller

    step = {"index": 0}

    def watch(component_id):
        def on_power(powered):
            state = "ON" if powered else "off"
            print(f"  [{step['index']}] {component_id} -> {state}")

        return on_power

    for component_id in controller.model.graph.component_ids:
        controller.register_power_listener(component_id, watch(component_id))

    print(f"Initial: {', '.join(controller.powered_components()) or '(nothing powered)'}")
    for index, event in enumerate(list(files.events), start=1):
        step["index"] = index
        print(f"{index}. {_describe_event(event)}")
        for component_id in _new_ids(controller, event):
            controller.register_power_listener(component_id, watch(component_id))
        apply_event(controller, event)
    files.events.clear()
    print(f"Final: {', '.join(controller.powered_components()) or '(nothing powered)'}")
    return 0


def _new_ids(controller: CircuitController, event: dict) -> list[str]:
    ids = [event.get(key) for key in ("id", "a", "b") if event.get(key)]
    return [cid for cid in ids if not controller.model.graph.has_component(cid)]


def _describe_event(event: dict) -> str:
    op = event["op"]
    if op in ("connect", "disconnect"):
        return f"{op} {event['a']} - {event['b']}"
    if op == "set_switch":
        return f"set_switch {event['id']} {'closed' if event['closed'] else 'open'}"
    if "id" in event:
        return f"{op} {event['id']}"
    return op


REPL_BANNER = """\
snapcircuit Interactive REPL
============================

Available objects:
  Circuit          - create and manipulate circuits
  COMPONENT_TYPES  - list of all supported component types

Quick start:
  c = Circuit()
  c.add("B1", "Battery").add("L1", "LED").add("S1", "Switch")
  c.loop("B1", "L1", "S1")
  c.close("S1")
  print(c.power_map)
"""


def build_repl_namespace(load_path: str | None = None, settings: CircuitSettings | None = None) -> dict:
    """Build the namespace dict for the interactive REPL."""
    from snapcircuit.models.component import COMPONENT_TYPES
    from snapcircuit.scripting.circuit import Circuit

    namespace = {
        "Circuit": Circuit,
        "COMPONENT_TYPES": COMPONENT_TYPES,
    }

    if load_path:
        try:
            namespace["circuit"] = Circuit.load(load_path, settings=settings)
            print(f"Loaded circuit from {load_path} as 'circuit'", file=sys.stderr)
        except (OSError, ValueError) as e:
            print(f"Warning: could not load {load_path}: {e}", file=sys.stderr)

    return namespace


def cmd_repl(args: argparse.Namespace) -> int:
    """Launch an interactive Python REPL with the scripting API."""
    import code

    namespace = build_repl_namespace(getattr(args, "load", None), args.settings)
    code.interact(banner=REPL_BANNER, local=namespace)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="snapcircuit",
        description="Inspect circuit files: power state, cycles, validation and event replay.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Settings JSON file (default: ~/.snapcircuit/settings.json)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    power_parser = subparsers.add_parser("power", help="Print which components are energized")
    power_parser.add_argument("circuit", help="Path to circuit JSON file")
    power_parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format (default: text)")
    power_parser.add_argument("--with-events", action="store_true", help="Apply the file's events before printing")

    cycles_parser = subparsers.add_parser("cycles", help="List cycles and whether they carry power")
    cycles_parser.add_argument("circuit", help="Path to circuit JSON file")

    val_parser = subparsers.add_parser("validate", help="Check a circuit file for errors")
    val_parser.add_argument("circuit", help="Path to circuit JSON file")

    replay_parser = subparsers.add_parser("replay", help="Replay the file's events and show power changes")
    replay_parser.add_argument("circuit", help="Path to circuit JSON file")

    repl_parser = subparsers.add_parser("repl", help="Launch interactive Python REPL with scripting API")
    repl_parser.add_argument("--load", help="Pre-load a circuit JSON file as 'circuit' variable")

    return parser


def main(argv=None) -> int:
    """CLI entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    store = SettingsStore(args.config)
    if args.log_level:
        store.set("log_level", args.log_level)
    args.settings = store.settings
    configure_logging(args.settings.log_level)

    handlers = {
        "power": cmd_power,
        "cycles": cmd_cycles,
        "validate": cmd_validate,
        "replay": cmd_replay,
        "repl": cmd_repl,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
