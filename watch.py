# watch.py
import logging
import time

from ovpnstatus.config import LOG_LEVEL, POLL_INTERVAL, STATUS_LOG_PATH
from ovpnstatus.parser import parse_status_log

logger = logging.getLogger("ovpnstatus.watch")


def poll_once(filepath=STATUS_LOG_PATH):
    try:
        clients, routes = parse_status_log(filepath)
    except Exception:
        logger.exception("Error parsing status log %s", filepath)
        return None

    logger.info("%d clients connected, %d routes", len(clients), len(routes))
    return clients, routes


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Watching %s every %ss", STATUS_LOG_PATH, POLL_INTERVAL)
    while True:
        poll_once()
        time.sleep(POLL_INTERVAL)
