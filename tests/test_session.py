"""Tests for the game session: respawn, mementos, tokens, and reset."""

import pytest

from geocoin.config import Config
from geocoin.errors import EmptyCacheError, EmptyInventoryError, InvalidMementoError, UnknownCellError
from geocoin.geocache import MAX_COIN_COUNT
from geocoin.grid import Board, Cell, LatLng
from geocoin.luck import initial_coin_count
from geocoin.session import GameSession, build_session_from_config
from geocoin.tokens import LifetimeSerialPolicy, PerVisitSerialPolicy

TILE = 1e-4
ORIGIN = LatLng(lat=0.0, lng=0.0)
CLASSROOM = LatLng(lat=36.9995, lng=-122.0533)


def make_luck(active_keys, coins=5):
    """Luck stub: caches only at ``active_keys``, each starting with ``coins``."""

    def _luck(key: str) -> float:
        if key.endswith(",initialValue"):
            return (coins + 0.5) / 100
        return 0.0 if key in active_keys else 0.5

    return _luck


def make_session(coins=5, **kwargs) -> GameSession:
    board = Board(TILE, 2, luck=make_luck({"0,0", "1,1"}, coins))
    return GameSession(board, start=ORIGIN, **kwargs)


def test_session_spawns_caches_on_start():
    session = make_session()
    assert session.active_cells() == [Cell(0, 0), Cell(1, 1)]
    assert session.coins_at(Cell(0, 0)) == 5
    assert len(session.mementos) == 2
    assert session.mementos.load(Cell(1, 1)) == "5"
    assert session.status_text() == "No points yet..."


def test_collect_updates_cache_memento_and_inventory():
    session = make_session()
    token = session.collect(Cell(0, 0))

    assert (token.i, token.j, token.serial) == (0, 0, 0)
    assert session.coins_at(Cell(0, 0)) == 4
    assert session.mementos.load(Cell(0, 0)) == "4"
    assert session.points == 1
    assert session.status_text() == "1 points accumulated"


def test_cache_state_survives_eviction():
    session = make_session()
    session.collect(Cell(0, 0))

    session.step("north", 10)
    assert session.active_cells() == []
    assert session.mementos.load(Cell(0, 0)) == "4"
    with pytest.raises(UnknownCellError):
        session.collect(Cell(0, 0))

    session.step("south", 10)
    assert session.active_cells() == [Cell(0, 0), Cell(1, 1)]
    assert session.coins_at(Cell(0, 0)) == 4
    assert session.coins_at(Cell(1, 1)) == 5


def test_collect_from_empty_cache_is_rejected():
    session = make_session(coins=0)
    with pytest.raises(EmptyCacheError):
        session.collect(Cell(0, 0))
    assert session.coins_at(Cell(0, 0)) == 0
    assert session.points == 0
    assert session.mementos.load(Cell(0, 0)) == "0"


def test_actions_on_unknown_or_inactive_cells():
    session = make_session()
    with pytest.raises(UnknownCellError):
        session.collect(Cell(50, 50))
    with pytest.raises(UnknownCellError):
        session.deposit(Cell(50, 50))

    # Known to the board but holding no cache.
    session.board.get_canonical_cell(1, 0)
    with pytest.raises(UnknownCellError) as excinfo:
        session.cache_at(Cell(1, 0))
    assert "no active geocache" in str(excinfo.value)


def test_deposit_pops_latest_token():
    session = make_session()
    first = session.collect(Cell(0, 0))
    second = session.collect(Cell(0, 0))
    third = session.collect(Cell(1, 1))
    assert [first.serial, second.serial, third.serial] == [0, 1, 0]

    deposited = session.deposit(Cell(0, 0))
    assert deposited == third
    assert session.coins_at(Cell(0, 0)) == 4
    assert session.coins_at(Cell(1, 1)) == 4
    assert session.mementos.load(Cell(0, 0)) == "4"
    assert session.inventory.peek() == second
    assert session.points == 2


def test_deposit_without_tokens_is_rejected():
    session = make_session()
    with pytest.raises(EmptyInventoryError):
        session.deposit(Cell(0, 0))
    assert session.coins_at(Cell(0, 0)) == 5
    assert session.mementos.load(Cell(0, 0)) == "5"


def test_move_to_same_position_is_idempotent():
    session = make_session()
    session.collect(Cell(1, 1))
    caches = [session.cache_at(cell) for cell in session.active_cells()]
    snapshot = dict(session.mementos.mementos)

    for _ in range(3):
        session.move_to(ORIGIN)

    assert [session.cache_at(cell) for cell in session.active_cells()] == caches
    assert all(a is b for a, b in zip(caches, [session.cache_at(c) for c in session.active_cells()]))
    assert session.mementos.mementos == snapshot


def test_reset_clears_everything():
    session = make_session()
    session.collect(Cell(0, 0))
    session.step("east", 10)

    session.reset()
    assert len(session.mementos) == 0
    assert session.active_cells() == []
    assert session.points == 0
    assert len(session.board) == 0
    assert session.position == ORIGIN

    session.refresh()
    assert session.coins_at(Cell(0, 0)) == 5
    assert session.mementos.load(Cell(0, 0)) == "5"


def test_reset_with_respawn_restarts_serials():
    session = make_session()
    session.collect(Cell(0, 0))
    session.reset(respawn=True)
    assert session.active_cells() == [Cell(0, 0), Cell(1, 1)]
    assert session.collect(Cell(0, 0)).serial == 0


def test_lifetime_serials_continue_across_visits():
    session = make_session(serial_policy=LifetimeSerialPolicy())
    session.collect(Cell(0, 0))
    session.step("north", 10)
    session.step("south", 10)
    assert session.collect(Cell(0, 0)).serial == 1


def test_per_visit_serials_restart_on_respawn():
    session = make_session(serial_policy=PerVisitSerialPolicy())
    session.collect(Cell(0, 0))
    assert session.collect(Cell(0, 0)).serial == 1
    session.step("north", 10)
    session.step("south", 10)
    assert session.collect(Cell(0, 0)).serial == 0


def test_listeners_receive_events_and_can_query_state():
    events = []
    session = make_session(listeners=[events.append])
    assert [event.kind for event in events] == ["spawn", "spawn", "move"]
    assert events[0].cell_key == "0,0" and events[0].num_coins == 5
    assert events[-1].position == ORIGIN

    seen_coins = []

    def on_event(event):
        if event.kind == "collect":
            seen_coins.append(session.coins_at(Cell(0, 0)))

    session.subscribe(on_event)
    token = session.collect(Cell(0, 0))
    assert events[-1].kind == "collect"
    assert events[-1].token == token
    assert events[-1].num_coins == 4
    assert seen_coins == [4]

    session.unsubscribe(on_event)
    session.unsubscribe(on_event)
    session.collect(Cell(0, 0))
    assert seen_coins == [4]

    session.step("north", 10)
    kinds = [event.kind for event in events[-3:]]
    assert kinds == ["despawn", "despawn", "move"]


def test_failing_listener_does_not_abort_action(capsys, monkeypatch):
    monkeypatch.setenv("GEOCOIN_NO_COLOR", "1")

    def broken(event):
        raise RuntimeError("boom")

    session = make_session()
    session.subscribe(broken)
    session.collect(Cell(0, 0))
    assert session.coins_at(Cell(0, 0)) == 4
    assert "[!] [Session] Listener failed on collect: boom" in capsys.readouterr().out


def test_verbose_session_prints_trace(capsys, monkeypatch):
    monkeypatch.setenv("GEOCOIN_NO_COLOR", "1")
    session = make_session(verbose=True)
    session.collect(Cell(0, 0))
    out = capsys.readouterr().out
    assert "[Spawn] 0,0: 5 coins (generated)" in out
    assert "[Collect] 0,0#0 from 0,0 (4 left)" in out


def test_step_rejects_unknown_direction():
    session = make_session()
    with pytest.raises(ValueError):
        session.step("up")
    assert session.position == ORIGIN


def test_step_moves_by_whole_tiles():
    session = make_session()
    session.step("EAST", 3)
    session.step("south")
    cell = session.board.get_cell_for_point(session.position)
    assert (cell.i, cell.j) == (-1, 3)


def test_scenario_collect_walk_away_and_return():
    board = Board(TILE, 8)
    session = GameSession(board, start=CLASSROOM)
    cells = session.active_cells()
    assert cells
    assert len(cells) < 16 * 16

    cell = next(cell for cell in cells if session.coins_at(cell) > 0)
    initial = initial_coin_count(board.luck, cell)
    assert session.coins_at(cell) == initial

    session.collect(cell)
    session.move_to(CLASSROOM.shifted(d_lat=1.0))
    assert cell not in session.active_cells()

    session.move_to(CLASSROOM)
    assert session.coins_at(cell) == initial - 1


def test_reset_regenerates_initial_counts():
    board = Board(TILE, 8)
    session = GameSession(board, start=CLASSROOM)
    cells = session.active_cells()
    for cell in cells:
        if session.coins_at(cell) > 0:
            session.collect(cell)

    session.reset()
    assert len(session.mementos) == 0
    session.refresh()
    assert session.active_cells() == cells
    for cell in cells:
        assert session.coins_at(cell) == initial_coin_count(board.luck, cell)


def test_build_session_from_config(monkeypatch):
    monkeypatch.setattr(Config, "NEIGHBORHOOD_SIZE", 3)
    monkeypatch.setattr(Config, "START_LAT", 0.0)
    monkeypatch.setattr(Config, "START_LNG", 0.0)
    monkeypatch.setattr(Config, "SERIAL_POLICY", "per_visit")
    monkeypatch.setattr(Config, "WORLD_SEED", "test-world")

    session = build_session_from_config()
    assert session.board.visibility_radius == 3
    assert session.position == ORIGIN
    assert isinstance(session.serial_policy, PerVisitSerialPolicy)
    assert session.board.luck("0,0") != Board(TILE, 3).luck("0,0")


def test_build_session_from_invalid_config(monkeypatch):
    monkeypatch.setattr(Config, "SPAWN_PROBABILITY", 2.0)
    with pytest.raises(ValueError):
        build_session_from_config()


def test_corrupt_memento_leaves_session_unchanged():
    session = make_session()
    session.collect(Cell(0, 0))
    session.step("north", 10)
    away = session.position
    session.mementos.save(Cell(1, 1), "garbage")
    snapshot = dict(session.mementos.mementos)

    with pytest.raises(InvalidMementoError):
        session.step("south", 10)

    assert session.position == away
    assert session.active_cells() == []
    assert session.mementos.mementos == snapshot


def test_corrupt_memento_keeps_current_caches_live():
    board = Board(TILE, 2, luck=make_luck({"0,0", "20,0"}))
    session = GameSession(board, start=ORIGIN)
    session.collect(Cell(0, 0))
    session.mementos.save(Cell(20, 0), "-3")

    with pytest.raises(InvalidMementoError):
        session.step("north", 20)

    assert session.position == ORIGIN
    assert session.active_cells() == [Cell(0, 0)]
    assert session.coins_at(Cell(0, 0)) == 4


def test_deposit_into_full_cache_keeps_token():
    session = make_session()
    token = session.collect(Cell(0, 0))
    session.cache_at(Cell(1, 1)).num_coins = MAX_COIN_COUNT

    with pytest.raises(ValueError):
        session.deposit(Cell(1, 1))
    assert session.inventory.peek() == token
    assert session.coins_at(Cell(1, 1)) == MAX_COIN_COUNT
