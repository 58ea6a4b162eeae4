"""
Dimension definition for parameter search spaces using Pydantic.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional
import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import InvalidDimension

# Sweep increment for a pinned dimension so the traversal loop stays finite
PINNED_SWEEP_INCREMENT = 0.1

_STEP_ALIASES = ("step_size", "stepSize")


def count_decimal_places(value: Any) -> int:
    """
    Count the digits after the decimal point in the shortest textual form of a number.

    Integral values (including 0 and 1.0) have no decimal places.
    """
    if value is None:
        return 0
    try:
        exponent = Decimal(str(value).strip()).normalize().as_tuple().exponent
    except InvalidOperation:
        return 0
    if not isinstance(exponent, int):
        return 0
    return max(0, -exponent)


def round_half_up(value: float, places: int) -> float:
    """Round to a fixed number of decimals, ties away from zero: 0.125 -> 0.13."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def format_value(value: float) -> str:
    """Render a value in its shortest decimal form: 3.0 -> '3', 0.25 -> '0.25'."""
    number = Decimal(str(float(value) + 0.0)).normalize()
    return format(number, 'f')


def _parse_number(raw: Any, field: str) -> float:
    if isinstance(raw, bool) or raw is None:
        raise ValueError(f"'{field}' must be a number, got {raw!r}")
    try:
        number = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValueError(f"'{field}' must be a number, got {raw!r}") from None
    if not number.is_finite():
        raise ValueError(f"'{field}' must be finite, got {raw!r}")
    return float(number)


class Dimension(BaseModel):
    """
    One tunable parameter: a bounded range walked in fixed steps.

    Args:
        name: Optional label of the parameter
        start: Lower bound (inclusive)
        end: Upper bound (inclusive)
        step: Spacing between values; 0 pins the dimension
        decimal_places: Precision of every value, derived from the textual form of step

    Examples:
        Dimension(start=5, end=50, step=5)
        Dimension.parse({"start": "0.5", "end": "2", "stepSize": "0.25"})
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Optional[str] = None
    start: float
    end: float
    step: float = Field(..., ge=0, description="Spacing between values, 0 means pinned")
    decimal_places: int = Field(0, ge=0, description="Digits kept after the decimal point")

    @model_validator(mode='before')
    @classmethod
    def parse_raw_values(cls, values: Any) -> Any:
        """Accept numeric strings and the legacy step aliases, derive decimal_places."""
        if not isinstance(values, Mapping):
            return values
        values = dict(values)

        for alias in _STEP_ALIASES:
            if alias in values:
                aliased = values.pop(alias)
                values.setdefault('step', aliased)

        for field in ('start', 'end', 'step'):
            if field not in values:
                raise ValueError(f"Missing '{field}'")
            raw = values[field]
            values[field] = _parse_number(raw, field)
            if field == 'step' and 'decimal_places' not in values:
                values['decimal_places'] = count_decimal_places(raw) if values[field] != 0 else 0

        return values

    @model_validator(mode='after')
    def validate_bounds(self):
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) must be <= end ({self.end})")
        return self

    @classmethod
    def parse(cls, raw: Any) -> "Dimension":
        """
        Build a Dimension from a raw range spec.

        Raises:
            InvalidDimension: if start/end/step are missing, unparseable or inconsistent.
        """
        if isinstance(raw, Dimension):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidDimension(f"Dimension spec must be a mapping, got {type(raw).__name__}", spec=raw)
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            reasons = "; ".join(error['msg'] for error in e.errors())
            raise InvalidDimension(f"Invalid dimension {dict(raw)!r}: {reasons}", spec=raw) from e

    @property
    def span(self) -> float:
        return self.end - self.start

    @property
    def is_pinned(self) -> bool:
        return self.step == 0

    @property
    def is_degenerate(self) -> bool:
        """A stepped dimension whose range is empty."""
        return self.step > 0 and self.start >= self.end

    @property
    def total_combinations(self) -> float:
        """Number of grid values, rounded to two decimals before counting the start value."""
        if self.step <= 0:
            return 1
        return round(self.span / self.step, 2) + 1

    def round_value(self, value: float) -> float:
        return round_half_up(value, self.decimal_places)

    def _round_within_bounds(self, value: float) -> float:
        # Rounding may cross a bound that is finer than the dimension's precision
        rounded = self.round_value(value)
        quantum = 10 ** -self.decimal_places
        if rounded > self.end:
            rounded = self.round_value(rounded - quantum)
        elif rounded < self.start:
            rounded = self.round_value(rounded + quantum)
        return min(max(rounded, self.start), self.end)

    def values(self) -> List[float]:
        """
        Grid values from start to end, generated index-wise and rounded to the dimension's precision.

        Points that rounding pushes outside [start, end] are dropped. A pinned dimension is
        swept in steps of 0.1 so its loop stays finite.
        """
        if self.step > 0:
            increment, places = self.step, self.decimal_places
        else:
            increment = PINNED_SWEEP_INCREMENT
            places = max(count_decimal_places(PINNED_SWEEP_INCREMENT), count_decimal_places(self.start))
        grid = np.arange(self.start, self.end + increment / 10, increment)
        rounded = [round_half_up(value, places) for value in grid]
        values = [value for value in rounded if self.start <= value <= self.end]
        return values or [self.start]

    def sample(self, random_state: Optional[np.random.RandomState] = None) -> float:
        """
        Draw a uniform value in [start, end] rounded to the dimension's precision.

        Args:
            random_state: Random state for reproducible sampling
        """
        rng = random_state or np.random.RandomState()
        return self._round_within_bounds(rng.uniform(self.start, self.end))

    def clip_value(self, value: float) -> float:
        """Clamp a value into [start, end], then round it without leaving the range."""
        return self._round_within_bounds(np.clip(value, self.start, self.end))

    def validate_value(self, value: float) -> bool:
        try:
            return self.start <= value <= self.end and self.round_value(value) == value
        except (TypeError, ValueError):
            return False

    def describe(self) -> str:
        return f"{format_value(self.start)}→{format_value(self.end)}"
