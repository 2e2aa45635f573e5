from __future__ import annotations

import logging
import re
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from molcalc.chem.elements import atomic_mass_table
from molcalc.chem.errors import (
    EmptyFormula,
    FormulaError,
    InvalidToken,
    UnbalancedGroup,
    UnknownElement,
)


logger = logging.getLogger(__name__)

HYDRATE_DELIMITERS = (".", "·")

_HYDRATE_SPLIT_RE = re.compile("|".join(re.escape(delimiter) for delimiter in HYDRATE_DELIMITERS))
_ELEMENT_RE = re.compile(r"[A-Z][a-z]?")
_COUNT_RE = re.compile(r"[0-9]+")
MAX_COUNT_DIGITS = 6


@dataclass(frozen=True)
class FormulaSegment:
    multiplier: int
    text: str
    offset: int  # index of ``text`` in the caller's string


def _read_count(text: str, index: int, offset: int) -> tuple[int, int]:
    """Read the digit run at ``index``; return ``(count, next_index)``, count 1 if absent."""
    match = _COUNT_RE.match(text, index)
    if not match:
        return 1, index
    digits = match.group(0)
    if len(digits) > MAX_COUNT_DIGITS:
        raise InvalidToken(offset + index + MAX_COUNT_DIGITS, digits[MAX_COUNT_DIGITS])
    value = int(digits)
    if value == 0:
        raise InvalidToken(offset + index, digits[0])
    return value, match.end()


def split_segments(formula: str) -> list[FormulaSegment]:
    """Split a formula on hydrate delimiters.

    Every segment after the first may start with a digit run giving its
    multiplier (``CuSO4.5H2O`` -> ``CuSO4`` x1, ``H2O`` x5). The first segment
    keeps its text untouched; a leading coefficient there is left for the scan
    to reject.
    """
    text = formula.strip()
    if not text:
        raise EmptyFormula()
    base = len(formula) - len(formula.lstrip())

    segments: list[FormulaSegment] = []
    start = 0
    for index, part in enumerate(_HYDRATE_SPLIT_RE.split(text)):
        offset = base + start
        start += len(part) + 1
        multiplier = 1
        if index > 0:
            multiplier, consumed = _read_count(part, 0, offset)
            part = part[consumed:]
            offset += consumed
        if not part:
            raise InvalidToken(offset)
        segments.append(FormulaSegment(multiplier=multiplier, text=part, offset=offset))
    return segments


class FormulaParser:
    """Turns formula strings into element counts checked against an atomic-mass table."""

    def __init__(self, table: Mapping[str, float] | None = None) -> None:
        self.table = atomic_mass_table(table)

    def parse(self, formula: str) -> dict[str, int]:
        if not isinstance(formula, str):
            raise TypeError(f"Formula must be a string, not {type(formula).__name__}.")

        totals: dict[str, int] = {}
        for segment in split_segments(formula):
            for symbol, count in self._scan(segment).items():
                totals[symbol] = totals.get(symbol, 0) + count * segment.multiplier

        if not totals:
            raise EmptyFormula()
        logger.debug("Parsed %r -> %s", formula, totals)
        return totals

    def _scan(self, segment: FormulaSegment) -> dict[str, int]:
        text = segment.text
        stack: list[defaultdict[str, int]] = [defaultdict(int)]
        openings: list[int] = []
        index = 0
        while index < len(text):
            char = text[index]
            position = segment.offset + index
            if char == "(":
                stack.append(defaultdict(int))
                openings.append(position)
                index += 1
            elif char == ")":
                if len(stack) == 1:
                    raise UnbalancedGroup(position)
                group = stack.pop()
                openings.pop()
                multiplier, index = _read_count(text, index + 1, segment.offset)
                for symbol, count in group.items():
                    stack[-1][symbol] += count * multiplier
            else:
                match = _ELEMENT_RE.match(text, index)
                if not match:
                    raise InvalidToken(position, char)
                symbol = match.group(0)
                if symbol not in self.table:
                    raise UnknownElement(symbol, position)
                count, index = _read_count(text, match.end(), segment.offset)
                stack[-1][symbol] += count

        if len(stack) != 1:
            raise UnbalancedGroup(openings[-1], unclosed=True)

        return dict(stack[0])


@lru_cache(maxsize=1)
def _default_parser() -> FormulaParser:
    return FormulaParser()


def parse_formula(formula: str, table: Mapping[str, float] | None = None) -> dict[str, int]:
    parser = _default_parser() if table is None else FormulaParser(table)
    return parser.parse(formula)


def validate_formula(formula: str, table: Mapping[str, float] | None = None) -> FormulaError | None:
    """Return the error a formula would raise, or ``None`` when it parses."""
    try:
        parse_formula(formula, table)
    except FormulaError as exc:
        return exc
    return None
