from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache

from pint import Quantity, UnitRegistry

from molcalc.chem.elements import atomic_mass_table
from molcalc.chem.errors import MassOutOfRange, MissingAtomicMass
from molcalc.chem.formula_parser import FormulaParser


logger = logging.getLogger(__name__)

MASS_DECIMALS = 2
MOLAR_MASS_UNIT = "g/mol"

ureg = UnitRegistry()
Q_ = ureg.Quantity


@dataclass(frozen=True)
class MassContribution:
    symbol: str
    count: int
    atomic_mass: float
    mass: float


def round_half_up(value: float, decimals: int = MASS_DECIMALS) -> float:
    """Round half away from zero, working on the shortest decimal repr of ``value``."""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def total_mass(contributions: list[MassContribution]) -> float:
    """Sum a breakdown and round it to ``MASS_DECIMALS``."""
    total = sum(item.mass for item in contributions)
    if not math.isfinite(total):
        raise MassOutOfRange()
    return round_half_up(total)


def format_breakdown(contribution: MassContribution) -> str:
    """Render one line like ``O12: 12 × 16.00 = 192.00``."""
    label = contribution.symbol if contribution.count == 1 else f"{contribution.symbol}{contribution.count}"
    return (
        f"{label}: {contribution.count} × {contribution.atomic_mass:.2f} = {contribution.mass:.2f}"
    )


class MolarMassCalculator:
    def __init__(self, table: Mapping[str, float] | None = None, parser: FormulaParser | None = None) -> None:
        self.parser = parser or FormulaParser(table)
        self.table = self.parser.table if table is None else atomic_mass_table(table)

    def breakdown(self, formula: str) -> list[MassContribution]:
        """Per-element contributions in parse order, unrounded."""
        counts = self.parser.parse(formula)
        contributions: list[MassContribution] = []
        for symbol, count in counts.items():
            atomic_mass = self.table.get(symbol)
            if atomic_mass is None:
                raise MissingAtomicMass(symbol)
            try:
                mass = atomic_mass * count
            except OverflowError:
                raise MassOutOfRange(symbol) from None
            if not math.isfinite(mass):
                raise MassOutOfRange(symbol)
            contributions.append(
                MassContribution(symbol=symbol, count=count, atomic_mass=atomic_mass, mass=mass)
            )
        return contributions

    def molar_mass(self, formula: str) -> float:
        result = total_mass(self.breakdown(formula))
        logger.debug("Molar mass of %r: %s %s", formula, result, MOLAR_MASS_UNIT)
        return result

    def quantity(self, formula: str) -> Quantity:
        return Q_(self.molar_mass(formula), MOLAR_MASS_UNIT)


@lru_cache(maxsize=1)
def _default_calculator() -> MolarMassCalculator:
    return MolarMassCalculator()


def _calculator(table: Mapping[str, float] | None) -> MolarMassCalculator:
    return _default_calculator() if table is None else MolarMassCalculator(table)


def molar_mass(formula: str, table: Mapping[str, float] | None = None) -> float:
    return _calculator(table).molar_mass(formula)


def mass_breakdown(formula: str, table: Mapping[str, float] | None = None) -> list[MassContribution]:
    return _calculator(table).breakdown(formula)
