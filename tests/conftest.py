import random

import pytest

from klondike import common as C
from klondike.game import KlondikeGame


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    # Never touch the real user settings file
    monkeypatch.delenv("APPDATA", raising=False)
    monkeypatch.setattr(C, "_settings_dir", lambda: str(tmp_path / "settings"))
    C.reset_settings()
    yield
    C.reset_settings()


@pytest.fixture
def game():
    g = KlondikeGame(rng=random.Random(1234))
    g.deal()
    return g


@pytest.fixture
def empty_game(game):
    for pile in game.piles:
        pile.clear()
    for c in game.cards:
        c.flip_down()
    return game


@pytest.fixture
def card():
    def _card(g, suit, rank):
        return next(c for c in g.cards if c.suit == suit and c.rank == rank)

    return _card


@pytest.fixture
def place(card):
    """Push (suit, rank, face_up) specs onto a pile, bottom first."""

    def _place(g, pile, *specs):
        placed = []
        for suit, rank, face_up in specs:
            c = card(g, suit, rank)
            pile.push(c)
            c.face_up = face_up
            placed.append(c)
        return placed

    return _place
