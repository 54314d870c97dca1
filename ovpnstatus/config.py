"""Configuration helpers for status log parsing and the API."""

import logging
import os

import pytz

_DEFAULT_TIMEZONE = "UTC"
_DEFAULT_POLL_INTERVAL = 10.0
_DEFAULT_LOG_LEVEL = "INFO"


def _load_timezone():
    tz_name = os.getenv("OVPNSTATUS_TZ", _DEFAULT_TIMEZONE)
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        # Fallback to default to keep the application running.
        return pytz.timezone(_DEFAULT_TIMEZONE)


def _load_path(env_var: str, default: str) -> str:
    path = os.getenv(env_var, default)
    return os.path.expanduser(path)


def _load_log_level(env_var: str, default: str) -> str:
    name = os.getenv(env_var, default).upper()
    # getLevelName maps known names to their numeric level.
    if isinstance(logging.getLevelName(name), int):
        return name
    return default


def _load_interval(env_var: str, default: float) -> float:
    raw = os.getenv(env_var)
    if raw is None:
        return default

    try:
        value = float(raw)
    except ValueError:
        return default

    return value if value > 0 else default


REFERENCE_TZ = _load_timezone()
STATUS_LOG_PATH = _load_path("OPENVPN_STATUS_LOG", "/var/log/openvpn/status.log")
POLL_INTERVAL = _load_interval("OVPNSTATUS_POLL_INTERVAL", _DEFAULT_POLL_INTERVAL)
LOG_LEVEL = _load_log_level("OVPNSTATUS_LOG_LEVEL", _DEFAULT_LOG_LEVEL)
