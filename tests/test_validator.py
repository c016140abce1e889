import pytest

from zeroledger.committee import Committee, ValidatorInfo
from zeroledger.dag import Dag
from zeroledger.types import Transfer
from zeroledger.validator import ValidatorState


def _committee(n: int = 1) -> Committee:
    return Committee(
        [ValidatorInfo(index=i, public_key=bytes([i + 1]) * 32, stake=100) for i in range(n)]
    )


def _transfer(nonce: int = 1, amount: int = 50) -> Transfer:
    return Transfer(bytes([1]) * 32, bytes([2]) * 32, amount, nonce, bytes(64))


@pytest.fixture
def state() -> ValidatorState:
    return ValidatorState(0, Dag(), _committee(), 100)


def test_submit_and_produce(state):
    state.submit_transfer(_transfer())
    assert state.pending_count() == 1

    event = state.try_produce_event(1000)
    assert event is not None
    assert event.round == 1
    assert event.author == 0
    assert len(event.transactions) == 1
    assert state.pending_count() == 0

    assert state.has_batch(event.digest)
    batch = state.take_batch(event.digest)
    assert batch is not None and len(batch) == 1
    assert not state.has_batch(event.digest)
    assert state.take_batch(event.digest) is None


def test_no_event_without_transfers(state):
    assert state.try_produce_event(1000) is None
    assert state.last_round() == 0


def test_heartbeat_produces_empty_event(state):
    event = state.produce_heartbeat(1000)
    assert event.round == 1
    assert event.transactions == ()
    assert state.peek_batch(event.digest) == []
    assert state.last_round() == 1


def test_second_event_references_first():
    dag = Dag()
    state = ValidatorState(0, dag, _committee(), 100)
    first = state.produce_heartbeat(1000)
    second = state.produce_heartbeat(1001)
    assert second.round == 2
    assert second.parents == (first.reference(),)
    assert dag.get(second.reference()) == second
    assert dag.current_round() == 2


def test_batch_size_is_capped():
    state = ValidatorState(0, Dag(), _committee(), 2)
    for nonce in (1, 2, 3):
        state.submit_transfer(_transfer(nonce=nonce))
    event = state.try_produce_event(1000)
    assert event.transactions == (0, 1)
    assert state.pending_count() == 1
    assert [t.nonce for t in state.peek_batch(event.digest)] == [1, 2]


def test_peek_does_not_remove(state):
    state.submit_transfer(_transfer())
    event = state.try_produce_event(1000)
    assert state.peek_batch(event.digest) == [_transfer()]
    assert state.batch_count() == 1


def test_single_validator_finalizes_previous_round(state):
    first = state.produce_heartbeat(1000)
    second = state.produce_heartbeat(1001)
    finalized = state.try_finalize()
    assert finalized == [first.reference()]
    assert second.reference() not in finalized


def test_distinct_timestamps_give_distinct_digests():
    a = ValidatorState(0, Dag(), _committee(), 100).produce_heartbeat(1000)
    b = ValidatorState(0, Dag(), _committee(), 100).produce_heartbeat(1001)
    same = ValidatorState(0, Dag(), _committee(), 100).produce_heartbeat(1000)
    assert a.digest != b.digest
    assert a.digest == same.digest


def test_parents_cover_other_validators():
    dag = Dag()
    committee = _committee(2)
    v0 = ValidatorState(0, dag, committee, 100)
    v1 = ValidatorState(1, dag, committee, 100)
    e0 = v0.produce_heartbeat(1000)
    e1 = v1.produce_heartbeat(1000)
    e2 = v0.produce_heartbeat(1001)
    assert set(e2.parents) == {e0.reference(), e1.reference()}


def test_prune_batches_drops_oldest(state):
    events = [state.produce_heartbeat(1000 + i) for i in range(5)]
    state.prune_batches(3)
    assert state.batch_count() == 5
    state.prune_batches(2)
    assert state.batch_count() == 2
    assert state.has_batch(events[-1].digest)
    assert not state.has_batch(events[0].digest)


def test_set_committee_changes_finalization():
    dag = Dag()
    state = ValidatorState(0, dag, _committee(1), 100)
    state.produce_heartbeat(1000)
    state.produce_heartbeat(1001)
    state.set_committee(_committee(3))
    assert state.try_finalize() == []