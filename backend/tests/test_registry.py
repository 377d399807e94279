import pytest

from chessroom.errors import Conflict
from chessroom.realtime import SessionRegistry
from chessroom.services.games import BLACK, WHITE


def _roles_are_unique(state):
    members = state.members()
    return len(members) == len(set(members))


def test_get_or_create_seeds_from_fallbacks():
    registry = SessionRegistry()
    state = registry.get_or_create(42, 1, 2)
    assert (state.white, state.black, state.observers) == (1, 2, set())
    # Existing entry is returned untouched
    assert registry.get_or_create(42, 9, 9) is state
    assert state.white == 1


def test_add_observer_is_idempotent():
    registry = SessionRegistry()
    registry.get_or_create(1, 10, None)
    assert registry.add_observer(1, 30) is True
    assert registry.add_observer(1, 30) is False
    assert registry.get(1).observers == {30}


def test_seated_participant_is_never_also_an_observer():
    registry = SessionRegistry()
    registry.get_or_create(1, 10, 20)
    assert registry.add_observer(1, 10) is False
    state = registry.get(1)
    assert state.white == 10
    assert 10 not in state.observers
    assert _roles_are_unique(state)


def test_assign_role_moves_observer_into_seat():
    registry = SessionRegistry()
    registry.get_or_create(1, 10, None)
    registry.add_observer(1, 20)
    state = registry.assign_role(1, 20, BLACK)
    assert state.black == 20
    assert 20 not in state.observers
    assert _roles_are_unique(state)


def test_assign_role_refuses_both_seats():
    registry = SessionRegistry()
    registry.get_or_create(1, 10, None)
    with pytest.raises(Conflict) as excinfo:
        registry.assign_role(1, 10, BLACK)
    assert excinfo.value.code == 'conflict'
    with pytest.raises(ValueError):
        registry.assign_role(1, 11, 'red')


def test_remove_observer_and_remove():
    registry = SessionRegistry()
    registry.get_or_create(1, 10, 20)
    registry.add_observer(1, 30)
    assert registry.remove_observer(1, 30) is True
    assert registry.remove_observer(1, 30) is False
    assert registry.remove(1).game_id == 1
    assert 1 not in registry
    assert registry.remove_observer(1, 30) is False


def test_lookup_by_participant_spans_sessions():
    registry = SessionRegistry()
    registry.get_or_create(1, 10, 20)
    registry.get_or_create(2, 30, 10)
    registry.get_or_create(3, 30, 40)
    registry.add_observer(3, 10)
    assert registry.seated_in(10) == {1: WHITE, 2: BLACK}
    assert registry.observing(10) == [3]
    assert len(registry) == 3


def test_set_seats_overwrites_swapped_seats():
    registry = SessionRegistry()
    registry.get_or_create(1, 20, 10)
    registry.add_observer(1, 30)
    state = registry.set_seats(1, 10, 30)
    assert (state.white, state.black) == (10, 30)
    assert state.observers == set()
    assert _roles_are_unique(state)
