# routes.py
from __future__ import annotations

import dataclasses
import datetime
import logging
from typing import Any, Dict, List

from flask import Flask, g, jsonify

from .addresses import split_real_address
from .models import ClientInfo, RoutingInfo, StatusResult
from .parser import MalformedNumericField, StreamUnavailable, parse_status_log


logger = logging.getLogger(__name__)

app = Flask(__name__)


def _json_error(message: str, status_code: int = 500, *, code: str = "internal_error"):
    payload = {"error": {"code": code, "message": message}}
    return jsonify(payload), status_code


def _to_json(record) -> Dict[str, Any]:
    data = dataclasses.asdict(record)
    for key, value in data.items():
        if isinstance(value, datetime.datetime):
            data[key] = value.isoformat()
    return data


def _client_payload(client: ClientInfo, routes: List[RoutingInfo]) -> Dict[str, Any]:
    entry = _to_json(client)
    real_ip, port = split_real_address(client.real_address)
    entry["real_ip"] = real_ip
    entry["port"] = port
    # Routing entries only reference clients by common name.
    entry["routes"] = [route.virtual_address for route in routes if route.common_name == client.name]
    return entry


def _get_cached_status() -> StatusResult:
    if "parsed_status" not in g:
        g.parsed_status = parse_status_log()
    return g.parsed_status


def _with_status(build):
    try:
        status = _get_cached_status()
    except StreamUnavailable as exc:
        logger.warning("Status log unavailable: %s", exc)
        return _json_error("Status log is unavailable", 503, code="status_unavailable")
    except MalformedNumericField as exc:
        logger.warning("Status log is malformed: %s", exc)
        return _json_error(str(exc), 422, code="malformed_status")
    except Exception:  # pragma: no cover - defensive logging
        logger.exception("Error while parsing status log")
        return _json_error("Failed to parse status log")

    return jsonify(build(status))


@app.route("/api/clients")
def api_clients():
    return _with_status(
        lambda status: {
            "clients": [_client_payload(client, status.routes) for client in status.clients]
        }
    )


@app.route("/api/routes")
def api_routes():
    return _with_status(lambda status: {"routes": [_to_json(route) for route in status.routes]})


@app.route("/api/status")
def api_status():
    return _with_status(
        lambda status: {
            "clients": [_client_payload(client, status.routes) for client in status.clients],
            "routes": [_to_json(route) for route in status.routes],
            "client_count": len(status.clients),
            "route_count": len(status.routes),
        }
    )


if __name__ == "__main__":
    app.run()
