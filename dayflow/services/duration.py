from __future__ import annotations

from datetime import date

from dayflow.exceptions import ValidationError


def add_years(anchor: date, years: int) -> date:
    """Shift a date by whole calendar years, clamping Feb 29 to Feb 28."""
    try:
        return anchor.replace(year=anchor.year + years)
    except ValueError:
        return anchor.replace(year=anchor.year + years, day=28)


def calculate_leave_days(start_date: date, end_date: date) -> int:
    """Count the calendar days covered by a leave span, both ends inclusive.

    Weekends and public holidays are counted like any other day.
    """
    return (end_date - start_date).days + 1


def validate_leave_window(
    start_date: date,
    end_date: date,
    today: date,
    max_advance_years: int = 1,
) -> None:
    """Reject spans that are reversed, start in the past, or start too far ahead.

    Only calendar dates are compared; a span starting today is accepted, as is
    one starting exactly ``max_advance_years`` from today.
    """
    if start_date > end_date:
        raise ValidationError("Start date must be before or equal to end date")

    if start_date < today:
        raise ValidationError("Cannot apply for leave starting in the past")

    if start_date > add_years(today, max_advance_years):
        unit = "year" if max_advance_years == 1 else "years"
        raise ValidationError(f"Cannot apply for leave more than {max_advance_years} {unit} in advance")
