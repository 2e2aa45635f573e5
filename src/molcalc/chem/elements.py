from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType


logger = logging.getLogger(__name__)

_SYMBOL_PATTERN = re.compile(r"[A-Z][a-z]?")
_MASS_PATTERN = re.compile(r"\d+(?:\.\d+)?")


def is_element_symbol(text: str) -> bool:
    return isinstance(text, str) and _SYMBOL_PATTERN.fullmatch(text) is not None


def _load_elements() -> list[dict]:
    from periodic_table_cli.cli import load_data

    data = load_data()
    return list(data.get("elements", []))


def _parse_mass(raw) -> float | None:
    """Return the standard atomic weight from a table field.

    Values come either as numbers or as strings carrying an uncertainty or a
    mass-number bracket, e.g. ``"1.00794(4)"`` or ``"[209]"``.
    """
    if raw in (None, "", " ", "-"):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        match = _MASS_PATTERN.search(str(raw))
        if not match:
            return None
        value = float(match.group(0))
    if not math.isfinite(value) or value <= 0:
        return None
    return value


@lru_cache(maxsize=1)
def default_atomic_masses() -> Mapping[str, float]:
    masses: dict[str, float] = {}
    for element in _load_elements():
        symbol = str(element.get("symbol") or "").strip()
        mass = _parse_mass(element.get("atomicMass", element.get("atomic_mass")))
        if not is_element_symbol(symbol) or mass is None:
            logger.debug("Skipping element entry without usable mass: %r", symbol)
            continue
        masses[symbol] = mass
    logger.debug("Loaded %d atomic masses from periodic_table_cli", len(masses))
    return MappingProxyType(masses)


def atomic_mass_table(mapping: Mapping[str, float] | None = None) -> Mapping[str, float]:
    """Validate an injected symbol -> mass mapping and return a read-only copy.

    ``None`` selects the bundled periodic-table data.
    """
    if mapping is None:
        return default_atomic_masses()
    checked: dict[str, float] = {}
    for symbol, raw in mapping.items():
        if not is_element_symbol(symbol):
            raise ValueError(f"Invalid element symbol in atomic mass table: {symbol!r}.")
        try:
            mass = float(raw)
        except (TypeError, ValueError):
            raise ValueError(f"Atomic mass for '{symbol}' is not a number: {raw!r}.") from None
        if not math.isfinite(mass) or mass <= 0:
            raise ValueError(f"Atomic mass for '{symbol}' must be positive, got {raw!r}.")
        checked[symbol] = mass
    return MappingProxyType(checked)
