"""
Helper functions for common infrastructure operations.

This module provides domain-agnostic utilities for:
- Money rounding and minor-unit conversion
- Proportional allocation of an amount over weights
- Random human-readable codes

Usage:
    from core.helpers import round2, allocate_proportionally

    fee = round2(gross * pct / 100)
    shares = allocate_proportionally(Decimal("100.00"), [Decimal("1"), Decimal("2")])
"""

from __future__ import annotations

import secrets
import string
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

CENT = Decimal("0.01")
CODE_ALPHABET = string.ascii_uppercase + string.digits


def round2(value) -> Decimal:
    """Round a money value to two places, half away from zero."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Convert a major-unit amount (e.g. pesos) to integer minor units."""
    return int(round2(amount) * 100)


def from_minor_units(minor: int) -> Decimal:
    """Convert integer minor units (e.g. centavos) to a two-place Decimal."""
    return (Decimal(int(minor)) / 100).quantize(CENT)


def allocate_proportionally(total_minor: int, weights: Sequence) -> list[int]:
    """
    Split ``total_minor`` into integer parts proportional to ``weights``.

    Every part but the last gets the floor of its exact share; the last
    part absorbs the rounding remainder, so the result always sums to
    ``total_minor`` and no part is negative.

    When every weight is zero the total is split evenly.

    Example:
        >>> allocate_proportionally(1000, [1, 1, 1])
        [333, 333, 334]
    """
    if not weights:
        return []
    total_minor = int(total_minor)
    decimal_weights = [Decimal(str(w)) for w in weights]
    if any(w < 0 for w in decimal_weights):
        raise ValueError("Weights must be non-negative")
    weight_sum = sum(decimal_weights)
    if weight_sum == 0:
        decimal_weights = [Decimal(1)] * len(weights)
        weight_sum = Decimal(len(weights))

    parts = [int(Decimal(total_minor) * w / weight_sum) for w in decimal_weights[:-1]]
    parts.append(total_minor - sum(parts))
    return parts


def generate_code(length: int = 6, prefix: str | None = None) -> str:
    """
    Generate a random upper-case alphanumeric code.

    Example:
        generate_code(6, "REFUND")  # "REFUND-7K2Q9X"
    """
    body = "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
    return f"{prefix}-{body}" if prefix else body
