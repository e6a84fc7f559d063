from __future__ import annotations

from typing import Iterable, List, Optional


class FinmarketError(Exception):
    """Base class for errors raised by finmarket_analysis."""


class SchemaMismatchError(FinmarketError):
    """Raised when required raw columns are absent (before any row is processed)."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: List[str] = sorted(missing)
        super().__init__(f"missing required columns: {self.missing}")


class TypeCoercionError(FinmarketError):
    """Raised when a raw cell cannot be converted to its target type."""

    def __init__(self, *, column: str, row: object, value: object, reason: Optional[str] = None) -> None:
        self.column = column
        self.row = row
        self.value = value
        self.reason = reason
        msg = f"cannot coerce column {column!r} at row {row!r}: value {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class UnknownQueryError(FinmarketError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown query: {name!r}")
