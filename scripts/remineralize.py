#!/usr/bin/env python3
"""Calculate grams of remineralizer for a TDS or GH target."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aquarium_engine.models import InvalidInputError
from aquarium_engine.remineralization import (
    Additive,
    get_remineralizer,
    list_remineralizers,
    solve_remineralization,
)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Remineralize RO water to a TDS or GH target")
    parser.add_argument("mode", choices=["tds", "gh"], help="Parameter the target refers to")
    parser.add_argument("target", type=float, help="Target TDS (ppm) or GH (dGH)")
    parser.add_argument("volume", type=float, help="Liters of water to remineralize")
    parser.add_argument("--product", choices=list_remineralizers(), help="Bundled product id")
    parser.add_argument("--tds-rate", type=float, help="TDS added per gram per liter")
    parser.add_argument("--gh-rate", type=float, help="GH added per gram per liter")
    parser.add_argument("--kh-rate", type=float, default=0.0, help="KH added per gram per liter")
    parser.add_argument("--starting-tds", type=float, default=0.0)
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.product:
        additive = get_remineralizer(args.product)
    else:
        additive = Additive(
            tds_per_gram_per_liter=args.tds_rate or 0.0,
            gh_per_gram_per_liter=args.gh_rate or 0.0,
            kh_per_gram_per_liter=args.kh_rate,
        )

    try:
        result = solve_remineralization(
            additive,
            args.starting_tds,
            {"mode": args.mode, "value": args.target},
            args.volume,
        )
    except InvalidInputError as err:
        parser.error(str(err))

    print(json.dumps(result.as_dict(), indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
