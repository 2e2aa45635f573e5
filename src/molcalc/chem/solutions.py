from __future__ import annotations

import math

from molcalc.chem.molar_mass import round_half_up


CONCENTRATION_DECIMALS = 4
PERCENT_DECIMALS = 2


def _finite(name: str, value: float) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number.")
    return number


def molar_concentration(moles: float, volume_l: float) -> float:
    """C_M = n / V, in mol/L."""
    n = _finite("moles", moles)
    v = _finite("volume_l", volume_l)
    if v <= 0:
        raise ValueError("volume_l must be greater than zero.")
    return round_half_up(n / v, CONCENTRATION_DECIMALS)


def mass_percent(mass_solute: float, mass_solution: float) -> float:
    """C% = m_solute / m_solution * 100."""
    solute = _finite("mass_solute", mass_solute)
    solution = _finite("mass_solution", mass_solution)
    if solution <= 0:
        raise ValueError("mass_solution must be greater than zero.")
    return round_half_up(solute / solution * 100, PERCENT_DECIMALS)
