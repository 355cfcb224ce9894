#!/usr/bin/env python3
"""Calculate an RO/tap water blend for GH and KH targets."""

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
from aquarium_engine.targets import get_mix_preset, list_mix_presets
from aquarium_engine.water_mix import mix_volumes, solve_mix

_LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Blend RO and tap water to reach GH/KH targets")
    parser.add_argument("--tap-gh", type=float, required=True, help="Tap water GH (dGH)")
    parser.add_argument("--tap-kh", type=float, required=True, help="Tap water KH (dKH)")
    parser.add_argument("--ro-gh", type=float, default=0.0, help="RO water GH (dGH)")
    parser.add_argument("--ro-kh", type=float, default=0.0, help="RO water KH (dKH)")
    parser.add_argument("--gh", type=float, help="Target GH")
    parser.add_argument("--kh", type=float, help="Target KH")
    parser.add_argument("--preset", choices=list_mix_presets(), help="Use a named GH/KH target")
    parser.add_argument("--mode", choices=["gh", "kh", "balanced"], default="balanced")
    parser.add_argument("--volume", type=float, help="Total liters of water to prepare")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    target = get_mix_preset(args.preset) if args.preset else {}
    if args.gh is not None:
        target["gh"] = args.gh
    if args.kh is not None:
        target["kh"] = args.kh
    if not target:
        parser.error("provide --gh/--kh or --preset")
    needed = ("gh", "kh") if args.mode == "balanced" else (args.mode,)
    missing = " and ".join(f"--{param}" for param in needed if param not in target)
    if missing:
        parser.error(f"--mode {args.mode} needs {missing} (or --preset)")

    try:
        result = solve_mix(
            {"gh": args.ro_gh, "kh": args.ro_kh},
            {"gh": args.tap_gh, "kh": args.tap_kh},
            target,
            args.mode,
        )
    except InvalidInputError as err:
        parser.error(str(err))

    output = result.as_dict()
    if args.volume:
        output.update(mix_volumes(result, args.volume))
    if not result.achievable:
        _LOGGER.warning("Target %s not achievable by blending these sources", target)
    print(json.dumps(output, indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
