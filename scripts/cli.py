"""Unified command line interface for the aquarium tools.

Usage::

    python -m scripts <command> [args]
    python -m scripts --list
"""

from __future__ import annotations

import argparse
from importlib import import_module
from typing import Dict

# Command name -> module in the ``scripts`` package exposing ``main(argv)``.
COMMANDS: Dict[str, str] = {
    "ei-report": "scripts.ei_report",
    "remineralize": "scripts.remineralize",
    "water-mix": "scripts.water_mix",
}


def _summary(module_name: str) -> str:
    doc = import_module(module_name).__doc__ or ""
    return doc.strip().splitlines()[0] if doc.strip() else ""


def main(argv: list[str] | None = None) -> None:
    """Run a tool subcommand."""
    parser = argparse.ArgumentParser(description="Aquarium dosing engine utilities")
    parser.add_argument("--list", action="store_true", help="List available commands")
    parser.add_argument("command", nargs="?", choices=sorted(COMMANDS))
    parser.add_argument("args", nargs=argparse.REMAINDER)
    ns = parser.parse_args(argv)

    if ns.list:
        for name in sorted(COMMANDS):
            print(f"{name:14} {_summary(COMMANDS[name])}")
        return
    if ns.command is None:
        parser.error("a command is required")

    import_module(COMMANDS[ns.command]).main(ns.args)


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
