"""Attribute statistics for the filter panel.

Scans the arguments once and derives, for every attribute name, whether it
is numeric or categorical, its distinct values with counts, and the numeric
range where one exists.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from listenviz.types import Argument, AttributeStats

logger = logging.getLogger(__name__)


def coerce_attribute_value(raw: Any) -> str:
    """Coerce a raw attribute value to its string form.

    None becomes the empty string, booleans are lowercased and integral
    floats lose their fractional part, so 5.0 and 5 read the same.
    """
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


def parse_number(value: str) -> float | None:
    """Parse a coerced attribute value as a finite number.

    Returns:
        The number, or None for blank, non-numeric, NaN or infinite values.
    """
    text = value.strip()
    # float() also takes digit separators and non-ASCII digits
    if not text or "_" in text or not text.isascii():
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


@dataclass
class _AttributeAccumulator:
    """Running statistics for one attribute name."""

    name: str
    counts: dict[str, int] = field(default_factory=dict)
    # Only ever flips from True to False, so the outcome is order independent
    still_numeric: bool = True
    minimum: float | None = None
    maximum: float | None = None

    def add(self, value: str) -> None:
        self.counts[value] = self.counts.get(value, 0) + 1

        if value.strip() == "":
            return

        number = parse_number(value)
        if number is None:
            self.still_numeric = False
            return

        if self.minimum is None or number < self.minimum:
            self.minimum = number
        if self.maximum is None or number > self.maximum:
            self.maximum = number

    def to_stats(self) -> AttributeStats:
        values = sorted(v for v in self.counts if v != "")
        numeric_range = None
        if self.still_numeric and values and self.minimum is not None:
            numeric_range = (self.minimum, self.maximum)

        return AttributeStats(
            name=self.name,
            kind="numeric" if self.still_numeric else "categorical",
            distinct_values=values,
            value_counts={v: self.counts[v] for v in values},
            numeric_range=numeric_range,
        )


def compute_attribute_stats(arguments: Iterable[Argument]) -> list[AttributeStats]:
    """Derive per-attribute statistics from all arguments.

    A key absent from an argument's attributes contributes nothing for that
    argument; an explicit null counts as the empty string. A key is numeric
    only if every non-empty value seen for it parses as a finite number.

    Args:
        arguments: All arguments of the report.

    Returns:
        One AttributeStats per attribute name, in first-seen order.
        Empty list if there are no arguments or no attributes.
    """
    accumulators: dict[str, _AttributeAccumulator] = {}

    for argument in arguments:
        if not argument.attributes:
            continue
        for name, raw_value in argument.attributes.items():
            accumulator = accumulators.get(name)
            if accumulator is None:
                accumulator = accumulators[name] = _AttributeAccumulator(name)
            accumulator.add(coerce_attribute_value(raw_value))

    stats = [acc.to_stats() for acc in accumulators.values()]
    logger.debug(
        "Computed stats for %d attributes (%d numeric)",
        len(stats),
        sum(1 for s in stats if s.kind == "numeric"),
    )
    return stats


def split_filterable(
    stats: Iterable[AttributeStats],
    max_chip_values: int,
) -> tuple[list[AttributeStats], list[AttributeStats]]:
    """Split stats into the attributes the filter panel can offer.

    Returns:
        Tuple of (categorical attributes with at most max_chip_values
        values, numeric attributes that have a range).
    """
    categorical: list[AttributeStats] = []
    numeric: list[AttributeStats] = []

    for attr in stats:
        if attr.kind == "categorical" and len(attr.distinct_values) <= max_chip_values:
            categorical.append(attr)
        elif attr.kind == "numeric" and attr.numeric_range is not None:
            numeric.append(attr)

    return categorical, numeric
