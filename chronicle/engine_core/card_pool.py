"""
Card Pool Manager - Lifecycle of event cards across the three pools.

    pending --(activation)--> active --(discard)--> discarded
       |                                               ^
       +----------------(removal)----------------------+

Design principles:
- Pure functions: (state, ...) -> new state, pools rebuilt as new lists
- A card is in exactly one pool; transfers never duplicate or drop cards
- Removal beats activation when both hold
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING
import logging
import random

from .state import CardPools, PoolName
from .conditions import check_activation, check_removal, check_trigger
from .weight import calculate_weight

if TYPE_CHECKING:
    from .event import EventCard
    from .state import WorldState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolStatus:
    """Card counts per pool. total_events is always the sum of the three."""
    pending_count: int
    active_count: int
    discarded_count: int
    total_events: int


@dataclass
class CardPoolManager:
    """
    Moves cards between pools and draws the next event.

    Stateless apart from its random source. Pass a seeded
    random.Random for reproducible draws; the default is the
    process-global generator.
    """
    rng: random.Random | None = None
    default_weight: float | None = None

    @property
    def _random(self):
        return self.rng if self.rng is not None else random

    def reconcile_pending(self, state: WorldState) -> WorldState:
        """
        Sweep the pending pool once.

        Each card is discarded if its removal conditions hold, else
        activated if its activation conditions hold, else left pending.
        Cards activated here are not rechecked for removal in the same call.
        """
        pools = state.card_pools
        still_pending: list[EventCard] = []
        activated: list[EventCard] = []
        removed: list[EventCard] = []

        for card in pools.pending:
            if check_removal(card.removal_conditions, state, card.character_id):
                removed.append(card)
            elif check_activation(card.activation_conditions, state, card.character_id):
                activated.append(card)
            else:
                still_pending.append(card)

        if activated or removed:
            logger.debug(
                "Reconciled pending pool: %d activated, %d removed, %d pending",
                len(activated), len(removed), len(still_pending),
            )

        new_pools = CardPools(
            pending=still_pending,
            active=pools.active + activated,
            discarded=pools.discarded + removed,
        )
        return state._copy_with(card_pools=new_pools)

    def eligible_events(self, state: WorldState) -> list[EventCard]:
        """Active cards whose trigger conditions currently hold."""
        return [
            card for card in state.card_pools.active
            if check_trigger(card.trigger_conditions, state, card.character_id)
        ]

    def select_next(self, state: WorldState) -> EventCard | None:
        """
        Draw the next event from the active pool.

        Roulette-wheel selection over trigger-eligible cards. Returns
        None when no card is eligible. If every weight is zero, picks
        uniformly among the eligible cards instead.
        """
        candidates = self.eligible_events(state)
        if not candidates:
            return None

        weights = [calculate_weight(card, state, self.default_weight) for card in candidates]
        total_weight = sum(weights)

        if total_weight == 0:
            return self._random.choice(candidates)

        remainder = self._random.random() * total_weight
        for card, weight in zip(candidates, weights):
            remainder -= weight
            if remainder <= 0:
                return card

        # Float rounding can leave a sliver past the last card
        return candidates[0]

    def discard(self, state: WorldState, event_id: str) -> WorldState:
        """Move a resolved card from active to discarded. No-op if it is not active."""
        pools = state.card_pools
        index = _index_of(pools.active, event_id)
        if index is None:
            return state

        card = pools.active[index]
        new_pools = CardPools(
            pending=pools.pending,
            active=pools.active[:index] + pools.active[index + 1:],
            discarded=pools.discarded + [card],
        )
        return state._copy_with(card_pools=new_pools)

    def add_to_pending(self, state: WorldState, cards: Iterable[EventCard]) -> WorldState:
        """Append cards to the pending pool. Duplicate IDs are kept."""
        pools = state.card_pools
        new_pools = CardPools(
            pending=pools.pending + list(cards),
            active=pools.active,
            discarded=pools.discarded,
        )
        return state._copy_with(card_pools=new_pools)

    def distribute(self, state: WorldState, cards: Iterable[EventCard]) -> WorldState:
        """
        Place freshly loaded cards.

        Cards with activation conditions wait in pending; the rest
        go straight to active.
        """
        pools = state.card_pools
        pending = list(pools.pending)
        active = list(pools.active)
        for card in cards:
            if card.activation_conditions is not None and not card.activation_conditions.is_empty:
                pending.append(card)
            else:
                active.append(card)
        new_pools = CardPools(pending=pending, active=active, discarded=pools.discarded)
        return state._copy_with(card_pools=new_pools)

    def force_activate(self, state: WorldState, event_id: str) -> WorldState:
        """Move a card from pending to active, ignoring its conditions."""
        pools = state.card_pools
        index = _index_of(pools.pending, event_id)
        if index is None:
            return state

        card = pools.pending[index]
        logger.info("Force-activated event %s", event_id)
        new_pools = CardPools(
            pending=pools.pending[:index] + pools.pending[index + 1:],
            active=pools.active + [card],
            discarded=pools.discarded,
        )
        return state._copy_with(card_pools=new_pools)

    def force_remove(self, state: WorldState, event_id: str) -> WorldState:
        """Discard a card from pending, or failing that from active."""
        pools = state.card_pools

        index = _index_of(pools.pending, event_id)
        if index is not None:
            card = pools.pending[index]
            new_pools = CardPools(
                pending=pools.pending[:index] + pools.pending[index + 1:],
                active=pools.active,
                discarded=pools.discarded + [card],
            )
            logger.info("Force-removed pending event %s", event_id)
            return state._copy_with(card_pools=new_pools)

        index = _index_of(pools.active, event_id)
        if index is not None:
            card = pools.active[index]
            new_pools = CardPools(
                pending=pools.pending,
                active=pools.active[:index] + pools.active[index + 1:],
                discarded=pools.discarded + [card],
            )
            logger.info("Force-removed active event %s", event_id)
            return state._copy_with(card_pools=new_pools)

        return state

    def status(self, state: WorldState) -> PoolStatus:
        """Count cards per pool."""
        pools = state.card_pools
        pending = len(pools.get_pool(PoolName.PENDING))
        active = len(pools.get_pool(PoolName.ACTIVE))
        discarded = len(pools.get_pool(PoolName.DISCARDED))
        return PoolStatus(
            pending_count=pending,
            active_count=active,
            discarded_count=discarded,
            total_events=pending + active + discarded,
        )


def _index_of(cards: list[EventCard], event_id: str) -> int | None:
    for i, card in enumerate(cards):
        if card.event_id == event_id:
            return i
    return None


# Convenience functions

def reconcile_pending(state: WorldState) -> WorldState:
    return CardPoolManager().reconcile_pending(state)


def select_next(state: WorldState, rng: random.Random | None = None) -> EventCard | None:
    return CardPoolManager(rng=rng).select_next(state)


def discard(state: WorldState, event_id: str) -> WorldState:
    return CardPoolManager().discard(state, event_id)


def pool_status(state: WorldState) -> PoolStatus:
    return CardPoolManager().status(state)
