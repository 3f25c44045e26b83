"""Value object for exact monetary amounts.

Amounts are held as an integer count of minor units plus a fixed scale
(``scale=2`` means cents). Binary floating point is never accepted.

Rounding: every operation that can produce a fractional minor unit
(``multiply``, ``divide``, ``percentage_of``) rounds half-up, i.e. ties are
rounded away from zero (``0.005 -> 0.01``, ``-0.005 -> -0.01``).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, field_validator

from fintrax.domain.shared.exceptions import InvalidAmountError

DEFAULT_SCALE = 2
MAX_SCALE = 6


def round_half_up(value: Fraction) -> int:
    """Round a rational number to the nearest integer, ties away from zero."""
    sign = -1 if value < 0 else 1
    magnitude = abs(value)
    whole = magnitude.numerator // magnitude.denominator
    if magnitude - whole >= Fraction(1, 2):
        whole += 1
    return sign * whole


def quantize_half_up(value: Fraction, places: int) -> Decimal:
    """Render a rational number as a Decimal with ``places`` fractional digits."""
    units = round_half_up(value * (10**places))
    return Decimal(units).scaleb(-places)


def _parse_minor_units(amount: Any, scale: int) -> int:
    if amount is None:
        msg = "Money amount is required"
        raise InvalidAmountError(msg)

    if isinstance(amount, (bool, float)):
        msg = f"Money amount must be Decimal, int or str, got {type(amount).__name__}"
        raise InvalidAmountError(msg, amount)

    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, int):
        value = Decimal(amount)
    elif isinstance(amount, str):
        try:
            value = Decimal(amount.strip())
        except InvalidOperation as e:
            msg = f"Malformed money amount: {amount!r}"
            raise InvalidAmountError(msg, amount) from e
    else:
        msg = f"Money amount must be Decimal, int or str, got {type(amount).__name__}"
        raise InvalidAmountError(msg, amount)

    if not value.is_finite():
        msg = f"Money amount must be finite: {value}"
        raise InvalidAmountError(msg, value)

    if value < 0:
        msg = f"Money amount cannot be negative: {value}"
        raise InvalidAmountError(msg, value)

    scaled = value.scaleb(scale)
    if scaled != scaled.to_integral_value():
        msg = f"Money cannot have more than {scale} decimal places: {value}"
        raise InvalidAmountError(msg, value)

    return int(scaled)


class Money(BaseModel):
    """Fixed-point monetary amount.

    ``Money("12.34")`` validates caller input (non-negative, finite, at most
    ``scale`` decimals). Results of arithmetic may be negative and are built
    through ``Money.from_minor_units``.
    """

    minor_units: int
    scale: int = DEFAULT_SCALE

    model_config = ConfigDict(frozen=True)

    # overriding pydantic init to allow positional amounts: Money("12.34")
    def __init__(
        self,
        amount: Decimal | int | str | None = None,
        scale: int = DEFAULT_SCALE,
        **data: Any,
    ):
        if "minor_units" not in data:
            data["minor_units"] = _parse_minor_units(amount, scale)
        super().__init__(scale=scale, **data)

    @field_validator("scale")
    @classmethod
    def validate_scale(cls, v: int) -> int:
        if not 0 <= v <= MAX_SCALE:
            msg = f"Money scale must be between 0 and {MAX_SCALE}"
            raise ValueError(msg)
        return v

    @classmethod
    def from_minor_units(cls, minor_units: int, scale: int = DEFAULT_SCALE) -> Money:
        return cls(minor_units=minor_units, scale=scale)

    @classmethod
    def zero(cls, scale: int = DEFAULT_SCALE) -> Money:
        return cls(minor_units=0, scale=scale)

    @classmethod
    def sum(cls, values: Iterable[Money], scale: int = DEFAULT_SCALE) -> Money:
        total = cls.zero(scale)
        for value in values:
            total = total + value
        return total

    @property
    def amount(self) -> Decimal:
        """Exact decimal value with exactly ``scale`` fractional digits."""
        return Decimal(self.minor_units).scaleb(-self.scale)

    def _require_same_scale(self, other: Money, operation: str) -> None:
        if not isinstance(other, Money):
            msg = f"Cannot {operation} Money and {type(other).__name__}"
            raise InvalidAmountError(msg, other)
        if other.scale != self.scale:
            msg = f"Cannot {operation} amounts of different scale: {self.scale} vs {other.scale}"  # NOQA: E501
            raise InvalidAmountError(msg)

    def __hash__(self) -> int:
        return hash((self.minor_units, self.scale))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return False
        return self.minor_units == other.minor_units and self.scale == other.scale

    def __add__(self, other: Money) -> Money:
        self._require_same_scale(other, "add")
        return Money.from_minor_units(self.minor_units + other.minor_units, self.scale)

    def __sub__(self, other: Money) -> Money:
        self._require_same_scale(other, "subtract")
        return Money.from_minor_units(self.minor_units - other.minor_units, self.scale)

    def __neg__(self) -> Money:
        return Money.from_minor_units(-self.minor_units, self.scale)

    def __mul__(self, factor: Decimal | int) -> Money:
        return self.multiply(factor)

    def __lt__(self, other: Money) -> bool:
        self._require_same_scale(other, "compare")
        return self.minor_units < other.minor_units

    def __le__(self, other: Money) -> bool:
        self._require_same_scale(other, "compare")
        return self.minor_units <= other.minor_units

    def __gt__(self, other: Money) -> bool:
        self._require_same_scale(other, "compare")
        return self.minor_units > other.minor_units

    def __ge__(self, other: Money) -> bool:
        self._require_same_scale(other, "compare")
        return self.minor_units >= other.minor_units

    def __str__(self) -> str:
        return self.format()

    def multiply(self, factor: Decimal | int | Fraction) -> Money:
        """Scale by a factor, rounding half-up to the minor unit."""
        if isinstance(factor, (bool, float)) or not isinstance(
            factor,
            (Decimal, int, Fraction),
        ):
            msg = "Money can only be multiplied by Decimal, int or Fraction"
            raise InvalidAmountError(msg, factor)
        if isinstance(factor, Decimal) and not factor.is_finite():
            msg = f"Money factor must be finite: {factor}"
            raise InvalidAmountError(msg, factor)
        product = Fraction(self.minor_units) * Fraction(factor)
        return Money.from_minor_units(round_half_up(product), self.scale)

    def divide(self, divisor: Decimal | int | Fraction) -> Money:
        """Divide by a scalar, rounding half-up to the minor unit."""
        if isinstance(divisor, (bool, float)) or not isinstance(
            divisor,
            (Decimal, int, Fraction),
        ):
            msg = "Money can only be divided by Decimal, int or Fraction"
            raise InvalidAmountError(msg, divisor)
        if isinstance(divisor, Decimal) and not divisor.is_finite():
            msg = f"Money divisor must be finite: {divisor}"
            raise InvalidAmountError(msg, divisor)
        if divisor == 0:
            msg = "Cannot divide Money by zero"
            raise InvalidAmountError(msg, divisor)
        quotient = Fraction(self.minor_units) / Fraction(divisor)
        return Money.from_minor_units(round_half_up(quotient), self.scale)

    def percentage_of(self, total: Money, places: int = 2) -> Decimal:
        """Return ``self / total * 100`` rounded half-up to ``places`` digits.

        A zero total yields ``0`` rather than an error.
        """
        self._require_same_scale(total, "compare")
        if total.minor_units == 0:
            return Decimal(0).scaleb(-places)
        ratio = Fraction(self.minor_units, total.minor_units) * 100
        return quantize_half_up(ratio, places)

    def format(self) -> str:
        """Decimal string with exactly ``scale`` fractional digits."""
        return f"{self.amount:f}"

    def is_zero(self) -> bool:
        return self.minor_units == 0

    def is_positive(self) -> bool:
        return self.minor_units > 0

    def is_negative(self) -> bool:
        return self.minor_units < 0

    def abs(self) -> Money:
        return Money.from_minor_units(abs(self.minor_units), self.scale)
