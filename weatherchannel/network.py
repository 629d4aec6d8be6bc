from __future__ import annotations

import logging
import socket


logger = logging.getLogger(__name__)

PROBE_HOST = "1.1.1.1"
PROBE_PORT = 53


def is_network_available(host: str = PROBE_HOST, port: int = PROBE_PORT, timeout: float = 1.5) -> bool:
    """Return True when a TCP connection to ``host:port`` can be opened."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError as exc:
        logger.debug("Network probe to %s:%s failed: %s", host, port, exc)
        return False


__all__ = ["is_network_available"]
