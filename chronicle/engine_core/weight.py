"""
Weight Calculator - Draw weight of an event card in the current state.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from ..config import DEFAULT_CONFIG

if TYPE_CHECKING:
    from .event import EventCard
    from .state import WorldState


def calculate_weight(
    event: EventCard,
    state: WorldState,
    default_weight: float | None = None,
) -> float:
    """
    Compute a card's draw weight.

    Starts from the card's base weight (the configured default when it
    is missing or zero), then multiplies in the first matching band of
    each dynamic-weight attribute. Bands are inclusive at both ends;
    if they overlap, the first one listed wins. Never negative.
    """
    if default_weight is None:
        default_weight = DEFAULT_CONFIG.default_event_weight

    weight = event.weight or default_weight

    for attribute, bands in event.dynamic_weight.items():
        value = state.emperor.get(attribute)
        if value is None:
            continue
        for band in bands:
            if band.contains(value):
                weight *= band.multiplier
                break

    return max(0.0, weight)
