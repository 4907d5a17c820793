import random
from collections import Counter

import pytest

from klondike import common as C


@pytest.mark.parametrize(
    "suit, rank, text, color",
    [
        ("Clubs", 1, "A♣", "black"),
        ("Diamonds", 10, "10♦", "red"),
        ("Hearts", 12, "Q♥", "red"),
        ("Spades", 13, "K♠", "black"),
    ],
)
def test_card_text_and_color(suit: str, rank: int, text: str, color: str) -> None:
    card = C.Card(suit, rank)
    assert str(card) == text
    assert card.color == color
    assert repr(card) == text + "↓"


def test_card_flip_and_identity_fields() -> None:
    card = C.Card("Hearts", 7)
    assert not card.face_up
    assert card.pile_id is None
    card.flip_up()
    assert card.face_up
    card.flip_down()
    assert not card.face_up
    with pytest.raises(AttributeError):
        card.rank = 8


@pytest.mark.parametrize("suit, rank", [("Stars", 1), ("Hearts", 0), ("Hearts", 14)])
def test_card_rejects_unknown_identity(suit, rank) -> None:
    with pytest.raises(ValueError):
        C.Card(suit, rank)


def test_cards_compare_by_identity() -> None:
    assert C.Card("Clubs", 2) != C.Card("Clubs", 2)


def test_create_builds_ordered_face_down_deck() -> None:
    deck = C.Deck()
    cards = deck.create()
    assert len(cards) == 52
    assert [(c.suit, c.rank) for c in cards[:13]] == [("Clubs", r) for r in range(1, 14)]
    assert [c.suit for c in cards[::13]] == ["Clubs", "Diamonds", "Hearts", "Spades"]
    assert all(not c.face_up and c.pile_id is None for c in cards)
    assert len({(c.suit, c.rank) for c in cards}) == 52


def test_create_accepts_supplied_identities() -> None:
    ids = list(reversed(C.standard_identities()))
    cards = C.Deck().create(ids)
    assert [(c.suit, c.rank) for c in cards] == ids


@pytest.mark.parametrize(
    "identities",
    [
        C.standard_identities()[:-1],
        C.standard_identities()[:-1] + [("Clubs", 1)],
        C.standard_identities() + [("Clubs", 1)],
    ],
    ids=["short", "duplicate", "long"],
)
def test_create_rejects_malformed_deck(identities) -> None:
    with pytest.raises(C.MalformedDeckError):
        C.Deck().create(identities)


def test_shuffle_is_a_permutation() -> None:
    deck = C.Deck()
    before = list(deck.create())
    after = deck.shuffle(780, random.Random(7))
    assert len(after) == 52
    assert {id(c) for c in after} == {id(c) for c in before}
    assert after != before


def test_duration_hint_does_not_change_permutation() -> None:
    a, b = C.Deck(), C.Deck()
    a.create()
    b.create()
    a.shuffle(0, random.Random(99))
    b.shuffle(5000, random.Random(99))
    assert [str(c) for c in a.cards] == [str(c) for c in b.cards]
    assert b.shuffle_duration_ms == 5000


def test_shuffle_distribution_is_roughly_uniform() -> None:
    # Where does the ace of clubs end up? Chi-squared over 52 positions.
    rng = random.Random(2024)
    trials = 5200
    deck = C.Deck()
    deck.create()
    ace = deck.cards[0]
    positions = Counter()
    for _ in range(trials):
        deck.shuffle(0, rng)
        positions[deck.cards.index(ace)] += 1
    expected = trials / 52
    chi2 = sum((positions.get(i, 0) - expected) ** 2 / expected for i in range(52))
    # 51 degrees of freedom; the 99.999th percentile is about 106
    assert chi2 < 110
    assert len(positions) == 52
