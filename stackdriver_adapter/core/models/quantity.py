from __future__ import annotations

import decimal
import math
from typing import Union

# Floating samples are accumulated in thousandths: 0.001 is the smallest step a quantity can represent.
MILLI = 1000


class Quantity:
    """
    A fixed-point number with millesimal resolution, rendered like a Kubernetes quantity.

    Integer contributions are exact. Floating contributions are converted to thousandths
    by truncating toward zero before they are added, so sums never accumulate floating error
    but anything below 0.001 is dropped.
    """

    __slots__ = ("_milli",)

    def __init__(self, milli: int = 0) -> None:
        self._milli = milli

    @classmethod
    def from_int(cls, value: int) -> Quantity:
        return cls(value * MILLI)

    @classmethod
    def from_float(cls, value: float) -> Quantity:
        if not math.isfinite(value):
            raise ValueError(f"Can't represent {value} as a quantity")
        return cls(int(value * MILLI))

    def add(self, other: Union[Quantity, int, float]) -> Quantity:
        if isinstance(other, bool):
            raise TypeError("bool is not a valid quantity value")
        if isinstance(other, int):
            other = Quantity.from_int(other)
        elif isinstance(other, float):
            other = Quantity.from_float(other)
        return Quantity(self._milli + other._milli)

    __add__ = add

    @property
    def milli_value(self) -> int:
        return self._milli

    @property
    def value(self) -> int:
        """Whole units, rounded up like `resource.Quantity.Value()` does."""
        return -(-self._milli // MILLI)

    def as_decimal(self) -> decimal.Decimal:
        return decimal.Decimal(self._milli).scaleb(-3)

    def __float__(self) -> float:
        return self._milli / MILLI

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Quantity):
            return self._milli == other._milli
        if isinstance(other, (int, float, decimal.Decimal)) and not isinstance(other, bool):
            return self.as_decimal() == decimal.Decimal(other)
        return NotImplemented

    def __hash__(self) -> int:
        # Equal to the hash of an int, float or Decimal that compares equal
        return hash(self.as_decimal())

    def __str__(self) -> str:
        if self._milli % MILLI == 0:
            return str(self._milli // MILLI)
        return f"{self._milli}m"

    def __repr__(self) -> str:
        return f"Quantity({str(self)!r})"
