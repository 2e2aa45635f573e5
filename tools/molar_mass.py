from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from molcalc.chem.errors import FormulaError
from molcalc.chem.formula_format import format_formula
from molcalc.chem.molar_mass import MOLAR_MASS_UNIT, MolarMassCalculator, format_breakdown, total_mass


logger = logging.getLogger("molar_mass")


def load_masses(path: Path) -> dict[str, float]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise SystemExit(f"Atomic mass file must contain a JSON object: {path}")
    return data


def report(formula: str, calculator: MolarMassCalculator, *, breakdown: bool = False) -> list[str]:
    contributions = calculator.breakdown(formula)
    counts = {item.symbol: item.count for item in contributions}
    lines = [
        f"Formula: {format_formula(counts).plain}",
        "Elements: " + ", ".join(f"{symbol}={count}" for symbol, count in counts.items()),
    ]
    if breakdown:
        lines.extend(f"  {format_breakdown(item)}" for item in contributions)
    lines.append(f"M = {total_mass(contributions):.2f} {MOLAR_MASS_UNIT}")
    return lines


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Parse a chemical formula and print its molar mass.")
    parser.add_argument("formula")
    parser.add_argument("--masses", type=Path, default=None, help="JSON object of symbol -> atomic mass")
    parser.add_argument("--breakdown", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    if args.masses is not None and not args.masses.exists():
        raise SystemExit(f"Atomic mass file not found: {args.masses}")

    try:
        table = load_masses(args.masses) if args.masses is not None else None
        calculator = MolarMassCalculator(table)
    except ValueError as exc:
        raise SystemExit(f"Invalid atomic mass table: {exc}") from None

    try:
        lines = report(args.formula, calculator, breakdown=args.breakdown)
    except FormulaError as exc:
        logger.debug("Rejected %r: %r", args.formula, exc)
        raise SystemExit(f"Invalid formula: {exc}") from None
    for line in lines:
        print(line)


if __name__ == "__main__":
    main()
