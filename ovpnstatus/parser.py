# parser.py
import datetime
import logging
import re
from typing import Iterable, List, Sequence

from .config import REFERENCE_TZ, STATUS_LOG_PATH
from .models import ClientInfo, RecordMarker, RoutingInfo, StatusResult


logger = logging.getLogger(__name__)

SPLIT_CHARACTER = ","

# HEADER,CLIENT_LIST,Common Name,Real Address,Virtual Address,Virtual IPv6 Address,
# Bytes Received,Bytes Sent,Connected Since,Connected Since (time_t),Username,
# Client ID,Peer ID,Data Channel Cipher
CLIENT_LIST_FIELDS = (
    "marker",
    "name",
    "real_address",
    "virtual_address",
    "virtual_v6_address",
    "bytes_received",
    "bytes_sent",
    "connected_since_display",
    "connected_since",
    "username",
    "client_id",
    "peer_id",
    "data_channel_cipher",
)

# HEADER,ROUTING_TABLE,Virtual Address,Common Name,Real Address,Last Ref,Last Ref (time_t)
ROUTING_TABLE_FIELDS = (
    "marker",
    "virtual_address",
    "common_name",
    "real_address",
    "last_ref_display",
    "last_ref",
)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class StatusParseError(Exception):
    """Base class for status log parsing failures."""


class StreamUnavailable(StatusParseError, OSError):
    """The status log could not be opened."""


class MalformedNumericField(StatusParseError, ValueError):
    """A record line is too short or carries a non-integer numeric field.

    ``value`` is ``None`` when the field is missing altogether. The scanner
    fills in ``line_number`` and ``partial`` (the records decoded before the
    failing line) before re-raising.
    """

    def __init__(self, marker, field, value=None, field_count=None):
        self.marker = marker
        self.field = field
        self.value = value
        self.field_count = field_count
        self.line_number = None
        self.partial = None
        super().__init__(self._describe())

    def _describe(self):
        if self.value is None:
            return (
                f"{self.marker} line has {self.field_count} fields, "
                f"missing {self.field!r}"
            )
        return f"{self.marker} field {self.field!r} is not an integer: {self.value!r}"

    def __str__(self):
        if self.line_number is None:
            return self._describe()
        return f"line {self.line_number}: {self._describe()}"


def split_fields(line: str, delimiter: str = SPLIT_CHARACTER) -> List[str]:
    return line.split(delimiter)


def _require_fields(marker: RecordMarker, parts: Sequence[str], schema) -> None:
    if len(parts) < len(schema):
        raise MalformedNumericField(
            marker.value, schema[len(parts)], field_count=len(parts)
        )


def _parse_int(marker: RecordMarker, field: str, value: str) -> int:
    if _INTEGER_RE.fullmatch(value) is None:
        raise MalformedNumericField(marker.value, field, value)
    return int(value)


def _parse_epoch(marker: RecordMarker, field: str, value: str) -> datetime.datetime:
    seconds = _parse_int(marker, field, value)
    try:
        return datetime.datetime.fromtimestamp(seconds, tz=REFERENCE_TZ)
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedNumericField(marker.value, field, value) from exc


def parse_client_list_entry(parts: Sequence[str]) -> ClientInfo:
    """Decode the fields of a CLIENT_LIST line.

    Field 7 (the human readable connection time) is skipped; the epoch
    seconds in field 8 are authoritative.
    """

    marker = RecordMarker.CLIENT_LIST
    _require_fields(marker, parts, CLIENT_LIST_FIELDS)

    bytes_received = _parse_int(marker, "bytes_received", parts[5])
    bytes_sent = _parse_int(marker, "bytes_sent", parts[6])
    connected_since = _parse_epoch(marker, "connected_since", parts[8])
    client_id = _parse_int(marker, "client_id", parts[10])
    peer_id = _parse_int(marker, "peer_id", parts[11])

    return ClientInfo(
        name=parts[1],
        real_address=parts[2],
        virtual_address=parts[3],
        virtual_v6_address=parts[4],
        bytes_received=bytes_received,
        bytes_sent=bytes_sent,
        connected_since=connected_since,
        username=parts[9],
        client_id=client_id,
        peer_id=peer_id,
        data_channel_cipher=parts[12],
    )


def parse_routing_table_entry(parts: Sequence[str]) -> RoutingInfo:
    marker = RecordMarker.ROUTING_TABLE
    _require_fields(marker, parts, ROUTING_TABLE_FIELDS)

    last_ref = _parse_epoch(marker, "last_ref", parts[5])

    return RoutingInfo(
        virtual_address=parts[1],
        common_name=parts[2],
        real_address=parts[3],
        last_ref=last_ref,
    )


def scan_status(lines: Iterable[str], stop_at_end: bool = False) -> StatusResult:
    """Decode CLIENT_LIST and ROUTING_TABLE lines from ``lines``.

    HEADER lines and unknown markers are skipped. END does not stop the
    scan unless ``stop_at_end`` is set. The first malformed record aborts
    the scan with :class:`MalformedNumericField`.
    """

    clients: List[ClientInfo] = []
    routes: List[RoutingInfo] = []

    for line_number, raw_line in enumerate(lines, start=1):
        parts = split_fields(raw_line.rstrip("\r\n"))
        marker = RecordMarker.classify(parts[0])

        if marker is None:
            logger.debug("Ignoring line %d with unknown marker %r", line_number, parts[0])
            continue

        if marker is RecordMarker.HEADER:
            continue

        if marker is RecordMarker.END:
            if stop_at_end:
                break
            continue

        try:
            if marker is RecordMarker.CLIENT_LIST:
                clients.append(parse_client_list_entry(parts))
            else:
                routes.append(parse_routing_table_entry(parts))
        except MalformedNumericField as exc:
            exc.line_number = line_number
            exc.partial = StatusResult(clients, routes)
            logger.debug("Aborting scan on malformed record: %s", exc)
            raise

    logger.debug("Decoded %d clients and %d routes", len(clients), len(routes))
    return StatusResult(clients, routes)


def parse_status_log(filepath=STATUS_LOG_PATH, stop_at_end=False):
    try:
        handle = open(filepath, "r", encoding="utf-8", errors="replace", newline="\n")
    except OSError as exc:
        raise StreamUnavailable(exc.errno, exc.strerror, str(filepath)) from exc

    with handle:
        return scan_status(handle, stop_at_end=stop_at_end)
