#!/usr/bin/env python3
"""Print an Estimative Index analysis for an aquarium document.

The input JSON holds ``tank``, ``fertilizers``, ``events`` and optionally
``water_source`` and ``today`` (see :mod:`aquarium_engine.schemas`).
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aquarium_engine.ei_analysis import analyze_tank
from aquarium_engine.schemas import parse_payload
from aquarium_engine.utils import load_data

_LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Estimative Index analysis for one tank")
    parser.add_argument("input", type=Path, help="JSON or YAML document describing the tank")
    parser.add_argument("--window", type=int, default=7, help="Days of dosing history to sum")
    parser.add_argument("--ei-fraction", type=float, default=1.0, help="Fraction of full EI targets")
    parser.add_argument("--horizon", type=int, default=7, help="Days to project")
    parser.add_argument("--water-change", type=float, default=0.5, help="Fraction of water replaced")
    parser.add_argument("--water-change-day", type=int, default=7)
    parser.add_argument(
        "--total-ppm",
        action="store_true",
        help="Compositions are already ppm per unit for the whole tank",
    )
    parser.add_argument("--output", type=Path, help="Optional path to write the report JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        inputs = parse_payload(load_data(args.input))
        analysis = analyze_tank(
            inputs["setup"],
            inputs["events"],
            inputs["compositions"],
            window_days=args.window,
            ei_fraction=args.ei_fraction,
            today=inputs["today"],
            per_liter=not args.total_ppm,
            horizon_days=args.horizon,
            water_change_fraction=args.water_change,
            water_change_day=args.water_change_day,
            source=inputs["source"],
        )
    except (ValueError, FileNotFoundError) as err:
        parser.error(str(err))

    if analysis.aggregation.skipped_events:
        _LOGGER.info(
            "Ignored %d dosing events for unknown fertilizers",
            analysis.aggregation.skipped_events,
        )

    text = json.dumps(analysis.as_dict(), indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text)
    else:
        print(text)


if __name__ == "__main__":  # pragma: no cover
    main()
