from __future__ import annotations

import html
from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class FormulaDisplay:
    plain: str
    rich: str


_SUBSCRIPT_MAP = {
    "0": "₀",
    "1": "₁",
    "2": "₂",
    "3": "₃",
    "4": "₄",
    "5": "₅",
    "6": "₆",
    "7": "₇",
    "8": "₈",
    "9": "₉",
}


def _subscript_number(value: int) -> str:
    return "".join(_SUBSCRIPT_MAP.get(ch, ch) for ch in str(value))


def _format_token(symbol: str, count: int, html_mode: bool) -> str:
    if html_mode:
        escaped = html.escape(symbol)
        return escaped if count <= 1 else f"{escaped}<sub>{count}</sub>"
    return symbol if count <= 1 else f"{symbol}{_subscript_number(count)}"


def hill_order(symbols: Iterable[str]) -> list[str]:
    """Carbon first, hydrogen second, the rest alphabetically.

    Without carbon every symbol, hydrogen included, is alphabetical.
    """
    symbols = list(symbols)
    if "C" not in symbols:
        return sorted(symbols)
    ordered = ["C"]
    if "H" in symbols:
        ordered.append("H")
    return ordered + sorted(s for s in symbols if s not in ("C", "H"))


def format_formula(counts: Mapping[str, int], *, hill: bool = False) -> FormulaDisplay:
    if not counts:
        return FormulaDisplay("", "")
    ordered = hill_order(counts) if hill else list(counts)
    plain = "".join(_format_token(sym, counts[sym], False) for sym in ordered)
    rich = "".join(_format_token(sym, counts[sym], True) for sym in ordered)
    return FormulaDisplay(plain=plain, rich=rich)
