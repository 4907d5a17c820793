
# main.py - entry point: deal a game and print the table (debug aid)
import logging
import os
import random

from klondike import common as C
from klondike.game import KlondikeGame


def _seed_from_env():
    raw = os.environ.get("KLONDIKE_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return raw


def main():
    level = os.environ.get("KLONDIKE_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    settings = C.load_settings()
    seed = _seed_from_env()
    game = KlondikeGame(rng=random.Random(seed), settings=settings)
    game.deal()
    print(game.describe())
    return game


if __name__ == "__main__":
    main()
