from __future__ import annotations


class FormulaError(ValueError):
    """Base class for every validation failure raised for a formula string."""


class InvalidToken(FormulaError):
    def __init__(self, position: int, character: str = "") -> None:
        self.position = position
        self.character = character
        if character:
            message = f"Unexpected character '{character}' at position {position}."
        else:
            message = f"Malformed formula at position {position}."
        super().__init__(message)


class UnknownElement(FormulaError):
    def __init__(self, symbol: str, position: int | None = None) -> None:
        self.symbol = symbol
        self.position = position
        super().__init__(f"Unknown element symbol '{symbol}'.")


class UnbalancedGroup(FormulaError):
    def __init__(self, position: int | None = None, *, unclosed: bool = False) -> None:
        self.position = position
        self.unclosed = unclosed
        if unclosed:
            message = "Unmatched opening parenthesis."
        else:
            message = "Unmatched closing parenthesis."
        super().__init__(message)


class EmptyFormula(FormulaError):
    def __init__(self) -> None:
        super().__init__("Formula contains no elements.")


class MissingAtomicMass(FormulaError, LookupError):
    """A validated symbol has no entry in the table used for the mass sum."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"No atomic mass available for '{symbol}'.")


class MassOutOfRange(FormulaError):
    """Counts multiply out to a mass too large for a float."""

    def __init__(self, symbol: str | None = None) -> None:
        self.symbol = symbol
        if symbol:
            message = f"Count of '{symbol}' is too large to compute a molar mass."
        else:
            message = "Formula is too large to compute a molar mass."
        super().__init__(message)
