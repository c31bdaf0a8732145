import pytest
import requests

from drips_sdk import DripsSettings, SubgraphClient, SubgraphQueryError
from drips_sdk.client import asset_id_to_address, log_index_from_id, map_streams_set_event

from builders import TOKEN, list_event, receiver


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def post(self, url, json=None, timeout=None):
        self.requests.append({"url": url, "json": json, "timeout": timeout})
        return self.responses.pop(0)

    def close(self):
        self.closed = True


def _record(event, event_id):
    return {
        "id": event_id,
        "accountId": str(event.account_id),
        "assetId": str(int(TOKEN, 16)),
        "receiversHash": "0x" + event.list_hash.hex(),
        "streamReceiverSeenEvents": [
            {"id": f"{event_id}-{i}", "receiverAccountId": str(s.receiver.account_id), "config": str(s.receiver.config)}
            for i, s in enumerate(event.receivers_seen)
        ],
        "streamsHistoryHash": "0x" + "ab" * 32,
        "balance": str(event.balance),
        "blockTimestamp": str(event.update_timestamp),
        "maxEnd": str(event.max_end),
    }


def test_helpers():
    assert asset_id_to_address(int(TOKEN, 16)) == TOKEN
    assert log_index_from_id("0xabc-12") == 12
    assert log_index_from_id("12") is None


def test_map_streams_set_event():
    event = list_event(100, [receiver(1), receiver(2)], ts=10, balance=5, max_end=20)
    mapped = map_streams_set_event(_record(event, "0xdead-3"))
    assert mapped.list_hash == event.list_hash
    assert mapped.token_address == TOKEN
    assert mapped.order_key == 3
    assert mapped.history_hash == b"\xab" * 32
    assert mapped.receivers_seen == event.receivers_seen
    assert (mapped.balance, mapped.max_end, mapped.update_timestamp) == (5, 20, 10)


def test_get_streams_set_events_paginates():
    events = [list_event(100, [receiver(i)], ts=i) for i in range(1, 4)]
    records = [_record(e, f"0x{i}-0") for i, e in enumerate(events)]
    session = FakeSession([
        FakeResponse({"data": {"streamsSetEvents": records[:2]}}),
        FakeResponse({"data": {"streamsSetEvents": records[2:]}}),
    ])
    client = SubgraphClient("https://subgraph.example/", page_size=2, session=session)

    out = client.get_streams_set_events(100, TOKEN.lower())

    assert [e.update_timestamp for e in out] == [1, 2, 3]
    assert [r["json"]["variables"]["skip"] for r in session.requests] == [0, 2]
    assert session.requests[0]["url"] == "https://subgraph.example"
    assert session.requests[0]["json"]["variables"]["accountId"] == "100"


def test_get_streams_set_events_filters_token():
    record = _record(list_event(100, [receiver(1)], ts=1), "0x1-0")
    session = FakeSession([FakeResponse({"data": {"streamsSetEvents": [record]}})])
    client = SubgraphClient("https://subgraph.example", session=session)
    assert client.get_streams_set_events(100, "0x" + "11" * 20) == []


def test_get_senders_streaming_to():
    records = [
        {"id": "a", "senderAccountId": "7", "receiverAccountId": "1", "config": "1"},
        {"id": "b", "senderAccountId": "9", "receiverAccountId": "1", "config": "1"},
        {"id": "c", "senderAccountId": "7", "receiverAccountId": "1", "config": "2"},
    ]
    session = FakeSession([FakeResponse({"data": {"streamReceiverSeenEvents": records}})])
    client = SubgraphClient("https://subgraph.example", session=session)
    assert client.get_senders_streaming_to(1) == [7, 9]


def test_http_error_raises_query_error():
    session = FakeSession([FakeResponse({}, status=502)])
    client = SubgraphClient("https://subgraph.example", session=session)
    with pytest.raises(SubgraphQueryError):
        client.query("{ x }", {})


def test_graphql_errors_raise_query_error():
    session = FakeSession([FakeResponse({"errors": [{"message": "boom"}]})])
    client = SubgraphClient("https://subgraph.example", session=session)
    with pytest.raises(SubgraphQueryError) as exc:
        client.query("{ x }", {})
    assert exc.value.meta["errors"] == [{"message": "boom"}]


def test_context_manager_closes_session():
    session = FakeSession([])
    with SubgraphClient("https://subgraph.example", session=session) as client:
        assert client.session.headers["Content-Type"] == "application/json"
    assert session.closed


def test_from_settings():
    client = SubgraphClient.from_settings(DripsSettings(subgraph_url="https://x.example", timeout=5, page_size=10))
    assert (client.base_url, client.timeout, client.page_size) == ("https://x.example", 5, 10)
    client.close()
