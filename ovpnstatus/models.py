"""Record types produced by the status log parser."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional


class RecordMarker(str, Enum):
    """Leading field of a status log line."""

    HEADER = "HEADER"
    END = "END"
    CLIENT_LIST = "CLIENT_LIST"
    ROUTING_TABLE = "ROUTING_TABLE"

    @classmethod
    def classify(cls, field: str) -> Optional["RecordMarker"]:
        try:
            return cls(field)
        except ValueError:
            return None


@dataclass(frozen=True)
class ClientInfo:
    """A connected client session, one per CLIENT_LIST line."""

    name: str
    real_address: str
    virtual_address: str
    virtual_v6_address: str
    bytes_received: int
    bytes_sent: int
    connected_since: datetime.datetime
    username: str
    client_id: int
    peer_id: int
    data_channel_cipher: str


@dataclass(frozen=True)
class RoutingInfo:
    """A routing table entry, one per ROUTING_TABLE line."""

    virtual_address: str
    common_name: str
    real_address: str
    last_ref: datetime.datetime


class StatusResult(NamedTuple):
    clients: List[ClientInfo]
    routes: List[RoutingInfo]
