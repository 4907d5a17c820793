
# common.py - shared constants, settings and card primitives for the Klondike engine
import json
import logging
import os
import random
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Defaults (may be overridden by persisted settings)
_DEFAULT_SETTINGS = {
    "draw_count": 1,            # cards moved from stock to waste per tap
    "stock_cycles": None,       # None = unlimited recycles
    "shuffle_duration_ms": 780, # animation hint only
    "cell_w": 100,
    "cell_h": 95,
    "tableau_top": 120,
}

_CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)


def _settings_dir() -> str:
    # Prefer %APPDATA% on Windows, else ~/.klondike_engine
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "KlondikeEngine")
    return os.path.join(os.path.expanduser("~"), ".klondike_engine")


def _settings_path() -> str:
    return os.path.join(_settings_dir(), "settings.json")


def get_current_settings():
    return dict(_CURRENT_SETTINGS)


def _coerce(key, value):
    if value is None:
        return _DEFAULT_SETTINGS[key] if key != "stock_cycles" else None
    return int(value)


def load_settings(path: Optional[str] = None):
    global _CURRENT_SETTINGS
    path = path or _settings_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return get_current_settings()
    except (OSError, ValueError) as exc:
        logger.warning("Could not read settings from %s: %s", path, exc)
        return get_current_settings()
    if isinstance(data, dict):
        for key in _DEFAULT_SETTINGS:
            if key not in data:
                continue
            try:
                _CURRENT_SETTINGS[key] = _coerce(key, data[key])
            except (TypeError, ValueError):
                logger.warning("Ignoring bad value for setting %r: %r", key, data[key])
    return get_current_settings()


def save_settings(new_values: dict, path: Optional[str] = None):
    # Merge and write to disk
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS.update({k: new_values[k] for k in _DEFAULT_SETTINGS if k in new_values})
    path = path or _settings_path()
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(_CURRENT_SETTINGS, f, indent=2)
    except OSError as exc:
        logger.warning("Could not write settings to %s: %s", path, exc)


def reset_settings():
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)


# ---------- Game constants ----------
TABLEAU_COUNT = 7
FOUNDATION_COUNT = 4
DECK_SIZE = 52

SUITS = ("Clubs", "Diamonds", "Hearts", "Spades")
UNICODE = {
    "Clubs": "♣",
    "Diamonds": "♦",
    "Hearts": "♥",
    "Spades": "♠",
}
ACE, KING = 1, 13
RANK_TO_TEXT = {1: "A", 11: "J", 12: "Q", 13: "K"}
for _r in range(2, 11):
    RANK_TO_TEXT[_r] = str(_r)
RANKS = tuple(range(ACE, KING + 1))


def is_red(suit):
    return suit in ("Diamonds", "Hearts")


# ---------- Errors ----------
class IllegalMoveError(RuntimeError):
    """A move was committed that the destination pile does not accept."""


class MalformedDeckError(ValueError):
    """The supplied card identities are not exactly one standard 52-card deck."""


# ---------- Cards & Deck ----------
class Card:
    __slots__ = ("_suit", "_rank", "face_up", "pile_id")

    def __init__(self, suit, rank, face_up=False):
        if suit not in UNICODE:
            raise ValueError(f"Unknown suit: {suit!r}")
        if rank not in RANK_TO_TEXT:
            raise ValueError(f"Unknown rank: {rank!r}")
        self._suit = suit
        self._rank = rank
        self.face_up = face_up
        self.pile_id: Optional[str] = None

    @property
    def suit(self):
        return self._suit

    @property
    def rank(self):
        return self._rank

    @property
    def color(self):
        return "red" if is_red(self._suit) else "black"

    def flip_up(self):
        self.face_up = True

    def flip_down(self):
        self.face_up = False

    def __str__(self):
        return f"{RANK_TO_TEXT[self._rank]}{UNICODE[self._suit]}"

    def __repr__(self):
        return f"{self}{'↑' if self.face_up else '↓'}"


def standard_identities() -> List[Tuple[str, int]]:
    return [(suit, rank) for suit in SUITS for rank in RANKS]


def validate_identities(identities: Iterable[Tuple[str, int]]) -> List[Tuple[str, int]]:
    """Return the identities as a list, or raise MalformedDeckError."""
    ids = list(identities)
    if len(ids) != DECK_SIZE:
        raise MalformedDeckError(f"Deck must hold {DECK_SIZE} cards, got {len(ids)}")
    if len(set(ids)) != DECK_SIZE:
        raise MalformedDeckError("Deck contains duplicate cards")
    if set(ids) != set(standard_identities()):
        raise MalformedDeckError("Deck contains cards outside the standard 52")
    return ids


class Deck:
    def __init__(self):
        self.cards: List[Card] = []
        self.shuffle_duration_ms = 0

    def create(self, identities: Optional[Iterable[Tuple[str, int]]] = None) -> List[Card]:
        ids = standard_identities() if identities is None else validate_identities(identities)
        self.cards = [Card(suit, rank, False) for suit, rank in ids]
        return self.cards

    def shuffle(self, duration_hint=0, rng: Optional[random.Random] = None) -> List[Card]:
        # duration_hint only paces the renderer's shuffle animation
        self.shuffle_duration_ms = duration_hint
        (rng or random).shuffle(self.cards)
        return self.cards
