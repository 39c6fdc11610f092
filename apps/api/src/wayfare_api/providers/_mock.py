"""Helpers shared by the generated-data providers."""

from __future__ import annotations

import random
from datetime import date


def pick_departure(
    rng: random.Random, times: list[str], min_hours: int, spread: int
) -> tuple[str, str, int]:
    """Pick a departure slot and derive an arrival time.

    Returns ``(departure, arrival, duration_hours)``.
    """
    departure = rng.choice(times)
    dep_hour = int(departure.split(":")[0])
    duration = min_hours + rng.randint(0, spread)
    arrival = f"{(dep_hour + duration) % 24:02d}:{rng.randint(0, 59):02d}"
    return departure, arrival, duration


def or_today(value: date | None) -> date:
    return value or date.today()
