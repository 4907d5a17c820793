# game.py - Klondike orchestrator: dealing, move commit, stock taps, drag/tap input
import logging
import random
import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pygame

from klondike import common as C
from klondike import mechanics as M
from klondike import scoring as S
from klondike.piles import FoundationPile, Pile, StockPile, TableauPile, WastePile

logger = logging.getLogger(__name__)


class KlondikeGame:
    """
    One game table: the deck, the 13 piles and the running score.

    Every mutation goes through the report_* / commit_move entry points,
    which are serialized by a single lock. Illegal gestures simply leave the
    table untouched.
    """

    def __init__(
        self,
        layout: Optional[M.BoardLayout] = None,
        rng: Optional[random.Random] = None,
        draw_count: Optional[int] = None,
        stock_cycles: Optional[int] = None,
        shuffle_duration_ms: Optional[int] = None,
        identities: Optional[Iterable[Tuple[str, int]]] = None,
        on_victory: Optional[Callable[["KlondikeGame"], None]] = None,
        settings: Optional[dict] = None,
    ):
        s = settings if settings is not None else C.get_current_settings()
        self.layout = layout or M.BoardLayout.from_settings(s)
        self.rng = rng or random.Random()
        self.draw_count = int(draw_count if draw_count is not None else s.get("draw_count", 1))
        if self.draw_count < 1:
            raise ValueError(f"draw_count must be at least 1, got {self.draw_count}")
        self.stock_cycles_allowed = stock_cycles if stock_cycles is not None else s.get("stock_cycles")
        self.shuffle_duration_ms = (
            shuffle_duration_ms if shuffle_duration_ms is not None else s.get("shuffle_duration_ms", 0)
        )
        self.on_victory = on_victory

        self.deck = C.Deck()
        self.deck.create(identities)
        self.cards: List[C.Card] = list(self.deck.cards)

        self.stock = StockPile("stock")
        self.waste = WastePile("waste")
        self.foundations = [FoundationPile(f"foundation-{i}") for i in range(C.FOUNDATION_COUNT)]
        self.tableau = [TableauPile(f"tableau-{i}") for i in range(C.TABLEAU_COUNT)]
        self._piles: Dict[str, Pile] = {p.pile_id: p for p in self.piles}

        self.state = S.GameState()
        self._dealt = False
        self._lock = threading.RLock()
        self._dragging: Optional[C.Card] = None
        self._drag_moved = False
        self._suppress_tap: Optional[C.Card] = None

    # ---------- Pile lookup ----------
    @property
    def piles(self) -> List[Pile]:
        return [self.stock, self.waste, *self.foundations, *self.tableau]

    def pile_of(self, card: C.Card) -> Optional[Pile]:
        if card.pile_id is None:
            return None
        return self._piles.get(card.pile_id)

    def slot_rect(self, pile: Pile) -> pygame.Rect:
        return self.layout.slot_rect(pile.pile_id)

    # ---------- Dealing ----------
    def _clear_all_piles(self):
        for p in self.piles:
            p.clear()
        for c in self.cards:
            c.flip_down()
            c.pile_id = None
        self._dragging = None
        self._drag_moved = False
        self._suppress_tap = None

    def deal(self):
        """Shuffle the deck and lay out a fresh game. Also used to replay."""
        with self._lock:
            self._clear_all_piles()
            self.deck.cards = list(self.cards)
            self.deck.shuffle(self.shuffle_duration_ms, self.rng)

            cards = iter(self.deck.cards)
            for col, pile in enumerate(self.tableau):
                for r in range(col + 1):
                    c = next(cards)
                    pile.push(c)
                    if r == col:
                        c.flip_up()

            # Remaining cards go to stock, face down
            for c in cards:
                self.stock.push(c)

            self.state = S.GameState()
            self._dealt = True
            logger.debug("Dealt new game: %d cards in stock", len(self.stock))

    # ---------- Two-phase move protocol ----------
    def propose_move(self, card: C.Card, target: Optional[Pile]) -> bool:
        if target is None:
            return False
        source = self.pile_of(card)
        if source is None or source is target:
            return False
        if source.top_card is not card or not card.face_up:
            return False
        if isinstance(source, StockPile):
            return False
        return target.accepts(card)

    def commit_move(self, card: C.Card, target: Pile) -> int:
        """Move ``card`` onto ``target`` and return the score delta applied."""
        with self._lock:
            if not self.propose_move(card, target):
                raise C.IllegalMoveError(f"{card} cannot move to {getattr(target, 'pile_id', None)}")
            source = self.pile_of(card)
            delta = S.move_delta(card, source, target)
            source.pop(card)
            target.push(card)
            S.record_move(self.state, delta)
            logger.debug("Moved %s %s -> %s (%+d)", card, source.pile_id, target.pile_id, delta)
            if S.update_victory(self.state, self.foundations) and self.on_victory:
                self.on_victory(self)
            return delta

    def _try_move(self, card: C.Card, target: Optional[Pile]) -> bool:
        if not self.propose_move(card, target):
            return False
        self.commit_move(card, target)
        return True

    # ---------- Input boundary ----------
    def hit_test(self, position: Sequence[float]) -> Optional[Pile]:
        return M.hit_test(position, self.foundations, self.tableau, self.layout)

    def begin_drag(self, card: C.Card) -> bool:
        with self._lock:
            source = self.pile_of(card)
            if source is None or isinstance(source, StockPile):
                return False
            if source.top_card is not card or not card.face_up:
                return False
            self._dragging = card
            self._drag_moved = False
            self._suppress_tap = None
            return True

    def report_drag_move(self, card: C.Card, position: Sequence[float]) -> Optional[Pile]:
        """Note drag progress; returns the pile under the card for highlighting."""
        with self._lock:
            if card is self._dragging:
                self._drag_moved = True
            return self.hit_test(position)

    def report_drop(self, card: C.Card, position: Sequence[float]) -> bool:
        with self._lock:
            if card is self._dragging and self._drag_moved:
                # The release that ends this drag must not double as a tap
                self._suppress_tap = card
            self._dragging = None
            self._drag_moved = False
            return self._try_move(card, self.hit_test(position))

    def report_tap(self, card: C.Card) -> bool:
        with self._lock:
            if card is self._dragging and self._drag_moved:
                return False
            if card is self._suppress_tap:
                self._suppress_tap = None
                return False
            source = self.pile_of(card)
            if source is None or source.top_card is not card or not card.face_up:
                return False
            target = M.find_tap_target(card, source, self.foundations, self.tableau)
            return self._try_move(card, target)

    def report_pile_tap(self, pile: Pile) -> bool:
        with self._lock:
            if pile is not self.stock:
                return False
            if self.stock.cards:
                drawn = []
                for _ in range(min(self.draw_count, len(self.stock))):
                    c = self.stock.pop()
                    self.waste.push(c)
                    drawn.append(c)
                logger.debug("Drew %s from stock", drawn)
                return True
            return self.recycle_waste()

    def recycle_waste(self) -> bool:
        with self._lock:
            if self.stock.cards or not self.waste.cards:
                return False
            if self.stock_cycles_allowed is not None:
                if self.state.stock_cycles_used >= self.stock_cycles_allowed:
                    logger.debug("No more stock cycles (%d allowed)", self.stock_cycles_allowed)
                    return False
            c = self.waste.pop()
            while c is not None:
                self.stock.push(c)
                c = self.waste.pop()
            S.record_recycle(self.state)
            logger.debug("Recycled waste into stock; score now %d", self.state.score)
            return True

    def tick(self, dt: float) -> float:
        with self._lock:
            if not self._dealt:
                return self.state.elapsed
            return S.advance_clock(self.state, dt)

    # ---------- Debug ----------
    def describe(self) -> str:
        def row(p: Pile) -> str:
            return " ".join(repr(c) for c in p.cards) or "--"

        lines = [
            f"Score: {self.state.score}  Moves: {self.state.moves}  Won: {self.state.won}",
            f"Stock ({len(self.stock)}): {row(self.stock)}",
            f"Waste ({len(self.waste)}): {row(self.waste)}",
        ]
        for f in self.foundations:
            lines.append(f"{f.pile_id}: {row(f)}")
        for t in self.tableau:
            lines.append(f"{t.pile_id}: {row(t)}")
        return "\n".join(lines)
