"""Score keeping and victory detection for Klondike."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from klondike import common as C
from klondike.piles import FoundationPile, Pile, TableauPile

logger = logging.getLogger(__name__)

FOUNDATION_POINTS = 10
TABLEAU_POINTS = 5
RECYCLE_PENALTY = -100


@dataclass
class GameState:
    score: int = 0
    elapsed: float = 0.0
    won: bool = False
    moves: int = 0
    stock_cycles_used: int = 0


def clamp_score(score: int) -> int:
    return max(0, score)


def move_delta(card: C.Card, source: Pile, target: Pile) -> int:
    """Return the points earned by moving ``card`` from ``source`` onto ``target``.

    Must be called before the move is committed, while the card beneath the
    moved one still shows its original face.
    """

    if isinstance(target, FoundationPile):
        return FOUNDATION_POINTS

    if isinstance(target, TableauPile):
        beneath = source.card_at(source.index_of(card) - 1)
        if beneath is not None:
            return 0 if beneath.face_up else TABLEAU_POINTS
        if card.rank == C.KING and target.is_empty():
            return TABLEAU_POINTS

    return 0


def apply_delta(state: GameState, delta: int) -> int:
    state.score = clamp_score(state.score + delta)
    return state.score


def record_move(state: GameState, delta: int) -> int:
    state.moves += 1
    return apply_delta(state, delta)


def record_recycle(state: GameState) -> int:
    state.stock_cycles_used += 1
    return apply_delta(state, RECYCLE_PENALTY)


def is_victory(foundations: Sequence[FoundationPile]) -> bool:
    return bool(foundations) and all(f.is_complete for f in foundations)


def update_victory(state: GameState, foundations: Sequence[FoundationPile]) -> bool:
    """Mark the game won; return True only the first time victory is reached."""

    if state.won or not is_victory(foundations):
        return False
    state.won = True
    logger.info("Game won: score=%d moves=%d elapsed=%.1fs", state.score, state.moves, state.elapsed)
    return True


def advance_clock(state: GameState, dt: float) -> float:
    if not state.won and dt > 0:
        state.elapsed += dt
    return state.elapsed
