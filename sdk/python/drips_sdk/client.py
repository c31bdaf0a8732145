"""
Drips subgraph client
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from eth_utils import decode_hex, to_checksum_address

from .errors import SubgraphQueryError
from .models import ListChangedEvent, ReceiverSeenEvent, StreamReceiver
from .settings import DripsSettings

logger = logging.getLogger(__name__)

STREAMS_SET_EVENTS_QUERY = """
query getStreamsSetEventsByAccountId($accountId: String!, $skip: Int, $first: Int) {
  streamsSetEvents(where: {accountId: $accountId}, skip: $skip, first: $first) {
    id
    accountId
    assetId
    receiversHash
    streamReceiverSeenEvents {
      id
      receiverAccountId
      config
    }
    streamsHistoryHash
    balance
    blockTimestamp
    maxEnd
  }
}
"""

RECEIVER_SEEN_EVENTS_QUERY = """
query getStreamReceiverSeenEventsByReceiverId($receiverAccountId: String!, $skip: Int, $first: Int) {
  streamReceiverSeenEvents(where: {receiverAccountId: $receiverAccountId}, skip: $skip, first: $first) {
    id
    senderAccountId
    receiverAccountId
    config
  }
}
"""


def asset_id_to_address(asset_id: Any) -> str:
    """Token address encoded in an asset id (the address as uint160)"""
    return to_checksum_address('0x' + format(int(asset_id), '040x'))


def log_index_from_id(event_id: str) -> Optional[int]:
    """Log index of a subgraph event id shaped `<txHash>-<logIndex>`"""
    tail = event_id.rsplit('-', 1)[-1]
    return int(tail) if tail.isdigit() and '-' in event_id else None


def map_streams_set_event(record: Dict[str, Any]) -> ListChangedEvent:
    """Map one `streamsSetEvents` record to a ListChangedEvent"""
    list_hash = decode_hex(record['receiversHash'])
    seen = tuple(
        ReceiverSeenEvent(
            list_hash=list_hash,
            receiver=StreamReceiver(account_id=int(r['receiverAccountId']), config=int(r['config'])),
        )
        for r in record.get('streamReceiverSeenEvents') or []
    )
    history_hash = record.get('streamsHistoryHash')
    return ListChangedEvent(
        account_id=int(record['accountId']),
        token_address=asset_id_to_address(record['assetId']),
        list_hash=list_hash,
        update_timestamp=int(record['blockTimestamp']),
        max_end=int(record['maxEnd']),
        balance=int(record['balance']),
        history_hash=decode_hex(history_hash) if history_hash else None,
        order_key=log_index_from_id(record['id']),
        receivers_seen=seen,
    )


class SubgraphClient:
    """
    Client fetching streams events from the Drips subgraph.

    Example:
        >>> with SubgraphClient("https://api.example/subgraphs/drips") as client:
        ...     events = client.get_streams_set_events(account_id)
    """

    def __init__(self, base_url: str, timeout: int = 30, page_size: int = 100, session: Optional[requests.Session] = None):
        """
        Initialize subgraph client.

        Args:
            base_url: GraphQL endpoint URL
            timeout: Request timeout in seconds (default: 30)
            page_size: Records fetched per request (default: 100)
            session: Session to reuse (default: a new requests.Session)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.page_size = page_size
        self.session = session or requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
        })

    @classmethod
    def from_settings(cls, settings: DripsSettings) -> "SubgraphClient":
        return cls(settings.subgraph_url, timeout=settings.timeout, page_size=settings.page_size)

    def _post(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Make POST request"""
        try:
            response = self.session.post(self.base_url, json=data, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise SubgraphQueryError(
                f"Subgraph query failed: {exc}",
                {'operation': 'query', 'url': self.base_url},
            ) from exc
        return response.json()

    def query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a GraphQL query.

        Returns:
            The `data` object of the response

        Raises:
            SubgraphQueryError: on HTTP failure or GraphQL errors
        """
        payload = self._post({'query': query, 'variables': variables})
        if payload.get('errors'):
            raise SubgraphQueryError(
                f"Subgraph query returned errors: {payload['errors']}",
                {'operation': 'query', 'variables': variables, 'errors': payload['errors']},
            )
        return payload.get('data') or {}

    def _paginate(self, query: str, field: str, variables: Dict[str, Any]) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        skip = 0
        while True:
            page = self.query(query, {**variables, 'skip': skip, 'first': self.page_size}).get(field) or []
            records.extend(page)
            logger.debug("Fetched %d %s (skip=%d)", len(page), field, skip)
            if len(page) < self.page_size:
                return records
            skip += self.page_size

    # Events

    def get_streams_set_events(self, account_id: int, token_address: Optional[str] = None) -> List[ListChangedEvent]:
        """
        Get an account's list-changed events, with receiver-seen events embedded.

        Args:
            account_id: Sender account ID
            token_address: Keep only events of this token (default: all tokens)

        Returns:
            List of ListChangedEvent objects, unordered
        """
        records = self._paginate(STREAMS_SET_EVENTS_QUERY, 'streamsSetEvents', {'accountId': str(account_id)})
        events = [map_streams_set_event(r) for r in records]
        if token_address is not None:
            events = [e for e in events if e.token_address.lower() == token_address.lower()]
        return events

    def get_senders_streaming_to(self, receiver_id: int) -> List[int]:
        """
        Get every sender that ever disclosed `receiver_id` as a receiver.

        Returns:
            Sender account IDs in first-seen order
        """
        records = self._paginate(
            RECEIVER_SEEN_EVENTS_QUERY, 'streamReceiverSeenEvents', {'receiverAccountId': str(receiver_id)}
        )
        senders: List[int] = []
        for record in records:
            sender = int(record['senderAccountId'])
            if sender not in senders:
                senders.append(sender)
        return senders

    def close(self):
        """Close the session"""
        self.session.close()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, *args):
        """Context manager exit"""
        self.close()
