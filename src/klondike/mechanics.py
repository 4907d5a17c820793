import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import pygame

from klondike import common as C
from klondike.piles import FoundationPile, Pile, StockPile, TableauPile, WastePile


def _grid_round(value: float) -> int:
    # Halves round up, so a card exactly between two slots lands on the right one
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class BoardLayout:
    """
    Slot geometry handed to the engine by whatever lays out the screen.

    The engine only reads it: origins of each pile row and the grid cell used
    to snap a dropped card to a column/row. Coordinates are board units (the
    renderer scales them however it likes).
    """

    cell_w: int = 100
    cell_h: int = 95
    stock_origin: Tuple[int, int] = (0, 0)
    waste_origin: Tuple[int, int] = (100, 0)
    foundation_origin: Tuple[int, int] = (300, 0)
    tableau_origin: Tuple[int, int] = (0, 120)

    @classmethod
    def from_settings(cls, settings: Optional[dict] = None) -> "BoardLayout":
        s = settings if settings is not None else C.get_current_settings()
        w = int(s.get("cell_w", 100))
        h = int(s.get("cell_h", 95))
        top = int(s.get("tableau_top", 120))
        return cls(
            cell_w=w,
            cell_h=h,
            stock_origin=(0, 0),
            waste_origin=(w, 0),
            foundation_origin=(3 * w, 0),
            tableau_origin=(0, top),
        )

    def foundation_slot(self, index: int) -> pygame.Rect:
        fx, fy = self.foundation_origin
        return pygame.Rect(fx + index * self.cell_w, fy, self.cell_w, self.cell_h)

    def tableau_slot(self, index: int) -> pygame.Rect:
        tx, ty = self.tableau_origin
        return pygame.Rect(tx + index * self.cell_w, ty, self.cell_w, self.cell_h)

    def slot_rect(self, pile_id: str) -> pygame.Rect:
        if pile_id == "stock":
            return pygame.Rect(self.stock_origin, (self.cell_w, self.cell_h))
        if pile_id == "waste":
            return pygame.Rect(self.waste_origin, (self.cell_w, self.cell_h))
        kind, _, idx = pile_id.partition("-")
        if kind == "foundation" and idx.isdigit():
            return self.foundation_slot(int(idx))
        if kind == "tableau" and idx.isdigit():
            return self.tableau_slot(int(idx))
        raise KeyError(f"Unknown pile id: {pile_id}")


def hit_test(
    position: Sequence[float],
    foundations: Sequence[FoundationPile],
    tableau: Sequence[TableauPile],
    layout: BoardLayout,
) -> Optional[Pile]:
    """Map a dropped card's top-left corner to the pile slot it lines up with.

    Purely geometric: whether the pile would take the card is not checked.
    Foundations win over the tableau; tableau columns extend downwards without
    limit so a drop anywhere along a long fanned column still counts.
    """
    x, y = position[0], position[1]

    fx, fy = layout.foundation_origin
    col = _grid_round((x - fx) / layout.cell_w)
    row = _grid_round((y - fy) / layout.cell_h)
    if 0 <= col < len(foundations) and row == 0:
        return foundations[col]

    tx, ty = layout.tableau_origin
    col = _grid_round((x - tx) / layout.cell_w)
    row = _grid_round((y - ty) / layout.cell_h)
    if 0 <= col < len(tableau) and row >= 0:
        return tableau[col]
    return None


def find_tap_target(
    card: C.Card,
    source: Pile,
    foundations: Sequence[FoundationPile],
    tableau: Sequence[TableauPile],
) -> Optional[Pile]:
    """Pick where a tapped card should go: foundations first, then tableau."""
    if isinstance(source, StockPile):
        return None
    if isinstance(source, (WastePile, TableauPile)):
        for pile in foundations:
            if pile is not source and pile.accepts(card):
                return pile
    for pile in tableau:
        if pile is not source and pile.accepts(card):
            return pile
    return None
