"""Scripted walk through the geocache grid.

Prints what a map UI would show while the player walks: which caches are
in range, what happens on collect/deposit, and that a cache keeps its coin
count after the player walks away and comes back.

    python examples/walk/run.py --path nnnneeeessssww --collect 3

Movement letters: n(orth), s(outh), e(ast), w(est). Grid settings come from
the GEOCOIN_* environment variables (see geocoin/config.py).
"""

from __future__ import annotations

import argparse

from geocoin import EmptyCacheError, EmptyInventoryError, GameSession, SessionEvent
from geocoin.config import Config
from geocoin.logging_utils import Color, colored, log_error, log_info, log_success
from geocoin.session import build_session_from_config

STEP_LETTERS = {"n": "north", "s": "south", "e": "east", "w": "west"}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Geocache grid walk")
    parser.add_argument("--path", default="nnnneeee", help="Movement letters (n/s/e/w)")
    parser.add_argument(
        "--collect",
        type=int,
        default=2,
        help="Coins to collect from the nearest cache at the start",
    )
    parser.add_argument("--events", action="store_true", help="Print every session event")
    return parser.parse_args()


def print_event(event: SessionEvent) -> None:
    if event.kind == "move":
        return
    print(colored(f"    event: {event.kind} {event.cell_key or ''} {event.num_coins if event.num_coins is not None else ''}", Color.CYAN))


def describe(session: GameSession) -> None:
    cells = session.active_cells()
    print(f"  Position: {session.position.lat:.5f}, {session.position.lng:.5f}")
    print(f"  Caches in range: {len(cells)}")
    for cell in cells[:5]:
        print(f"    {cell.key}: {session.coins_at(cell)} coins")
    if len(cells) > 5:
        print(f"    ... and {len(cells) - 5} more")
    print(f"  {session.status_text()}")


def main(args: argparse.Namespace) -> None:
    log_info(Config.display())
    session = build_session_from_config(listeners=[print_event] if args.events else None)
    describe(session)

    cells = session.active_cells()
    if not cells:
        log_error("No caches near the start position; try another GEOCOIN_WORLD_SEED")
        return

    home = next((cell for cell in cells if session.coins_at(cell) > 0), cells[0])
    before = session.coins_at(home)
    for _ in range(args.collect):
        try:
            token = session.collect(home)
        except EmptyCacheError as exc:
            log_error(str(exc))
            break
        print(f"  Collected {token}")
    after_collect = session.coins_at(home)

    for letter in args.path.lower():
        if letter not in STEP_LETTERS:
            log_error(f"Skipping unknown movement letter {letter!r}")
            continue
        session.step(STEP_LETTERS[letter])
    print("After walking:")
    describe(session)

    session.move_to(session.start)
    restored = session.coins_at(home)
    print(f"Back at start: cache {home.key} had {before}, left with {after_collect}, now shows {restored}")
    if restored == after_collect:
        log_success("Cache state survived the walk")

    try:
        token = session.deposit(home)
        print(f"  Deposited {token}; cache now has {session.coins_at(home)} coins")
    except EmptyInventoryError as exc:
        log_error(str(exc))


if __name__ == "__main__":
    main(parse_args())
