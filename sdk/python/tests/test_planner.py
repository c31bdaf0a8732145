import pytest

from drips_sdk import (
    CycleConfig,
    HashChainVerifier,
    InsufficientHistoryError,
    SqueezePlanner,
    SqueezeSelector,
    StreamsState,
)
from drips_sdk.constants import ZERO_HASH

from builders import TOKEN, list_event, receiver, with_history_hashes

RECEIVER = 42
NOW = 1050


class FakeEventSource:
    def __init__(self, events_by_sender):
        self.events_by_sender = events_by_sender

    def get_streams_set_events(self, account_id, token_address=None):
        return list(self.events_by_sender.get(account_id, []))

    def get_senders_streaming_to(self, receiver_id):
        return list(self.events_by_sender)


class FakeChainReader:
    def __init__(self, hashes):
        self.hashes = hashes
        self.calls = []

    def streams_state(self, account_id, token_address):
        self.calls.append(account_id)
        return StreamsState(
            list_hash=b"\x00" * 32,
            history_hash=self.hashes[account_id],
            update_time=0,
            balance=0,
            max_end=0,
        )


@pytest.fixture
def events():
    return {
        100: with_history_hashes([
            list_event(100, [receiver(RECEIVER)], ts=900),
            list_event(100, [receiver(RECEIVER), receiver(7)], ts=1020),
        ]),
        200: with_history_hashes([list_event(200, [receiver(RECEIVER)], ts=900)]),
    }


def _planner(events, hashes):
    selector = SqueezeSelector(CycleConfig(cycle_secs=100), clock=lambda: NOW)
    return SqueezePlanner(FakeEventSource(events), FakeChainReader(hashes), selector=selector)


def test_plan_builds_proofs_for_squeezable_senders(events):
    hashes = {100: events[100][-1].history_hash, 200: events[200][-1].history_hash}
    planner = _planner(events, hashes)

    proofs = planner.plan(RECEIVER, TOKEN)

    assert [p.sender_id for p in proofs] == [100]
    proof = proofs[0]
    assert proof.account_id == RECEIVER
    assert proof.history_hash == ZERO_HASH
    assert [e.update_timestamp for e in proof.history] == [900, 1020]
    assert not any(e.hidden for e in proof.history)
    assert HashChainVerifier.replay_history(proof.history_hash, proof.history) == hashes[100]
    assert planner.chain_reader.calls == [100]


def test_plan_rejects_stale_chain_state(events):
    planner = _planner(events, {100: b"\x01" * 32, 200: b"\x02" * 32})
    with pytest.raises(InsufficientHistoryError):
        planner.plan(RECEIVER, TOKEN)


def test_histories_skip_senders_without_events(events):
    events[300] = []
    planner = _planner(events, {})
    assert set(planner.histories(RECEIVER, TOKEN)) == {100, 200}
