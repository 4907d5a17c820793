# piles.py - card piles and their Klondike acceptance rules
from typing import List, Optional

from klondike import common as C


class Pile:
    """Ordered stack of cards, bottom first.

    Subclasses only decide which cards they accept and how a card's face
    changes on entering or leaving the pile. Only the top card ever moves.
    """

    def __init__(self, pile_id: str):
        self.pile_id = pile_id
        self.cards: List[C.Card] = []

    def __len__(self):
        return len(self.cards)

    def __repr__(self):
        return f"{type(self).__name__}({self.pile_id!r}, {self.cards!r})"

    def is_empty(self) -> bool:
        return not self.cards

    @property
    def top_card(self) -> Optional[C.Card]:
        return self.cards[-1] if self.cards else None

    def card_at(self, index: int) -> Optional[C.Card]:
        if 0 <= index < len(self.cards):
            return self.cards[index]
        return None

    def index_of(self, card: C.Card) -> int:
        for i, c in enumerate(self.cards):
            if c is card:
                return i
        return -1

    def accepts(self, card: C.Card) -> bool:
        return False

    def push(self, card: C.Card):
        self.cards.append(card)
        card.pile_id = self.pile_id

    def pop(self, card: Optional[C.Card] = None) -> Optional[C.Card]:
        top = self.top_card
        if top is None:
            return None
        if card is not None and card is not top:
            raise C.IllegalMoveError(f"{card} is not the top card of {self.pile_id}")
        self.cards.pop()
        top.pile_id = None
        self._exposed()
        return top

    def _exposed(self):
        pass

    def clear(self) -> List[C.Card]:
        cards, self.cards = self.cards, []
        for c in cards:
            c.pile_id = None
        return cards


class StockPile(Pile):
    def push(self, card: C.Card):
        card.flip_down()
        super().push(card)


class WastePile(Pile):
    def push(self, card: C.Card):
        card.flip_up()
        super().push(card)


class FoundationPile(Pile):
    @property
    def suit(self) -> Optional[str]:
        # Locked by the Ace that started the pile
        return self.cards[0].suit if self.cards else None

    @property
    def is_complete(self) -> bool:
        top = self.top_card
        return top is not None and top.rank == C.KING

    def accepts(self, card: C.Card) -> bool:
        top = self.top_card
        if top is None:
            return card.rank == C.ACE
        return card.suit == top.suit and card.rank == top.rank + 1


class TableauPile(Pile):
    def accepts(self, card: C.Card) -> bool:
        top = self.top_card
        if top is None:
            return card.rank == C.KING
        return top.face_up and card.color != top.color and card.rank == top.rank - 1

    def _exposed(self):
        # Newly exposed tableau tops are always turned over
        top = self.top_card
        if top is not None and not top.face_up:
            top.flip_up()
