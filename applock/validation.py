"""Input validation for PIN entry flows."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass
class ValidationIssue:
    field: str
    message: str


def validate_pin(pin: str | None, *, length: int, field: str = "pin") -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not pin:
        issues.append(ValidationIssue(field, "Enter a PIN."))
        return issues
    if len(pin) != length:
        issues.append(ValidationIssue(field, f"The PIN must be exactly {length} digits."))
    if not (pin.isascii() and pin.isdigit()):
        issues.append(ValidationIssue(field, "The PIN may only contain digits 0-9."))
    return issues


def validate_pin_confirmation(
    pin: str | None,
    confirmation: str | None,
    *,
    field: str = "confirm_pin",
) -> list[ValidationIssue]:
    if pin != confirmation:
        return [ValidationIssue(field, "The PINs do not match.")]
    return []


def collect_issues(*sources: Iterable[ValidationIssue]) -> list[ValidationIssue]:
    aggregated: list[ValidationIssue] = []
    for source in sources:
        aggregated.extend(source)
    return aggregated


__all__ = [
    "ValidationIssue",
    "collect_issues",
    "validate_pin",
    "validate_pin_confirmation",
]
