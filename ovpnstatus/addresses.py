"""Helpers for the real address column of the status log."""

import re
from ipaddress import ip_address

# OpenVPN 2.5+ may prefix the address with the transport, e.g. "udp4:1.2.3.4:1194".
_TRANSPORT_PREFIX_RE = re.compile(r"(?:udp|tcp)[46]?(?:-server|-client)?:")


def _is_ip(value: str) -> bool:
    try:
        ip_address(value)
    except ValueError:
        return False
    return True


def split_real_address(address: str):
    """Return ``(host, port)`` for a client real address; port is "" when absent."""

    value = address.strip()
    prefix = _TRANSPORT_PREFIX_RE.match(value)
    if prefix:
        value = value[prefix.end():]

    if not value or _is_ip(value):
        return value, ""

    if value.startswith("["):
        host, _, port = value[1:].partition("]")
        return host, port[1:] if port.startswith(":") else ""

    host, sep, port = value.rpartition(":")
    if sep and port.isdigit() and _is_ip(host):
        return host, port
    return value, ""
