from __future__ import annotations

import sys
import unittest
from pathlib import Path

from pint import Quantity

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from molcalc.chem.errors import (
    FormulaError,
    InvalidToken,
    MassOutOfRange,
    MissingAtomicMass,
    UnbalancedGroup,
    UnknownElement,
)
from molcalc.chem.formula_parser import FormulaParser
from molcalc.chem.molar_mass import (
    MassContribution,
    MolarMassCalculator,
    format_breakdown,
    mass_breakdown,
    molar_mass,
    round_half_up,
    total_mass,
)


MASSES = {
    "H": 1.008,
    "C": 12.011,
    "O": 16.00,
    "Na": 22.99,
    "S": 32.07,
    "Cl": 35.45,
    "Ca": 40.08,
    "Fe": 55.85,
    "Cu": 63.55,
}


class MolarMassTests(unittest.TestCase):
    def setUp(self) -> None:
        self.calculator = MolarMassCalculator(MASSES)

    def test_iron_sulfate(self) -> None:
        self.assertEqual(self.calculator.molar_mass("Fe2(SO4)3"), 399.91)

    def test_water(self) -> None:
        self.assertEqual(self.calculator.molar_mass("H2O"), 18.02)

    def test_hydrate(self) -> None:
        # 63.55 + 32.07 + 9 * 16.00 + 10 * 1.008
        self.assertEqual(self.calculator.molar_mass("CuSO4·5H2O"), 249.70)

    def test_module_function_accepts_table(self) -> None:
        self.assertEqual(molar_mass("NaCl", MASSES), 58.44)

    def test_mass_is_positive(self) -> None:
        for formula in ("H", "Ca(OH)2", "C6H12O6", "CuSO4.5H2O"):
            with self.subTest(formula=formula):
                self.assertGreater(self.calculator.molar_mass(formula), 0)

    def test_parse_errors_propagate(self) -> None:
        with self.assertRaises(UnbalancedGroup):
            self.calculator.molar_mass("Ca(OH")
        with self.assertRaises(UnknownElement):
            self.calculator.molar_mass("Xx2O")
        with self.assertRaises(InvalidToken):
            self.calculator.molar_mass("123")

    def test_missing_mass_after_validation(self) -> None:
        parser = FormulaParser(MASSES)
        calculator = MolarMassCalculator({"H": 1.008}, parser=parser)
        with self.assertRaises(MissingAtomicMass) as ctx:
            calculator.molar_mass("H2O")
        self.assertEqual(ctx.exception.symbol, "O")
        self.assertIsInstance(ctx.exception, LookupError)

    def test_quantity_has_molar_mass_units(self) -> None:
        quantity = self.calculator.quantity("H2O")
        self.assertIsInstance(quantity, Quantity)
        self.assertAlmostEqual(quantity.magnitude, 18.02)
        self.assertAlmostEqual(quantity.to("kg/mol").magnitude, 0.01802)

    def test_overlong_counts_are_formula_errors(self) -> None:
        for digits in (308, 400, 5000):
            with self.subTest(digits=digits):
                with self.assertRaises(InvalidToken):
                    self.calculator.molar_mass("H" + "9" * digits)

    def test_count_too_large_for_float(self) -> None:
        formula = "(" * 60 + "H" + ")999999" * 60
        with self.assertRaises(MassOutOfRange) as ctx:
            self.calculator.molar_mass(formula)
        self.assertEqual(ctx.exception.symbol, "H")
        self.assertIsInstance(ctx.exception, FormulaError)

    def test_mass_overflowing_to_infinity(self) -> None:
        formula = "(" * 51 + "Fe10" + ")999999" * 51
        with self.assertRaises(MassOutOfRange) as ctx:
            self.calculator.molar_mass(formula)
        self.assertEqual(ctx.exception.symbol, "Fe")

    def test_invalid_table_is_rejected(self) -> None:
        for table in ({"H": 0}, {"H": -1.0}, {"h": 1.0}, {"H": "heavy"}):
            with self.subTest(table=table):
                with self.assertRaises(ValueError):
                    MolarMassCalculator(table)


class BreakdownTests(unittest.TestCase):
    def test_breakdown_lines(self) -> None:
        contributions = mass_breakdown("Fe2(SO4)3", MASSES)
        self.assertEqual([item.symbol for item in contributions], ["Fe", "S", "O"])
        self.assertEqual([item.count for item in contributions], [2, 3, 12])
        self.assertAlmostEqual(sum(item.mass for item in contributions), 399.91)

    def test_total_mass_rounds_breakdown(self) -> None:
        self.assertEqual(total_mass(mass_breakdown("Fe2(SO4)3", MASSES)), 399.91)

    def test_total_mass_rejects_infinite_sum(self) -> None:
        contributions = [
            MassContribution(symbol="Fe", count=1, atomic_mass=1.0, mass=1.5e308),
            MassContribution(symbol="O", count=1, atomic_mass=1.0, mass=1.5e308),
        ]
        with self.assertRaises(MassOutOfRange):
            total_mass(contributions)

    def test_format_breakdown(self) -> None:
        line = format_breakdown(MassContribution(symbol="O", count=12, atomic_mass=16.0, mass=192.0))
        self.assertEqual(line, "O12: 12 × 16.00 = 192.00")
        line = format_breakdown(MassContribution(symbol="Fe", count=1, atomic_mass=55.85, mass=55.85))
        self.assertEqual(line, "Fe: 1 × 55.85 = 55.85")


class RoundingTests(unittest.TestCase):
    def test_half_rounds_away_from_zero(self) -> None:
        self.assertEqual(round_half_up(0.125), 0.13)
        self.assertEqual(round_half_up(2.675), 2.68)
        self.assertEqual(round_half_up(-0.125), -0.13)

    def test_decimals(self) -> None:
        self.assertEqual(round_half_up(1.23456, 4), 1.2346)


if __name__ == "__main__":
    unittest.main()
