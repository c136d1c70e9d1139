from __future__ import annotations

import socket
import time
from threading import Event

from .events import log_event

# Floor for the per-attempt connect timeout.
MIN_CONNECT_TIMEOUT_S = 0.05


def wait_for_port(
    hostname: str,
    port: int,
    timeout_s: float,
    quiet: bool = False,
    interval_s: float = 1.0,
    cancel: Event | None = None,
    connect_timeout_s: float | None = None,
) -> bool:
    """Block until a TCP connection to hostname:port succeeds or the timeout elapses.

    A timeout <= 0 makes no connection attempt. Every failed attempt, whatever the
    error, sleeps `interval_s` before the next one. Setting `cancel` ends the wait
    early with False. Each attempt is bounded by `connect_timeout_s`, or by the time
    left before the deadline when that is not given.
    """
    sleeper = cancel if cancel is not None else Event()
    deadline = time.monotonic() + timeout_s

    while time.monotonic() < deadline:
        remaining = max(deadline - time.monotonic(), MIN_CONNECT_TIMEOUT_S)
        attempt_timeout = remaining if connect_timeout_s is None else min(connect_timeout_s, remaining)
        log_event("INFO", f"Checking {hostname}:{port}")
        try:
            conn = socket.create_connection((hostname, port), timeout=attempt_timeout)
        except (OSError, OverflowError, ValueError, TypeError):
            if sleeper.wait(interval_s):
                break
            continue
        conn.close()
        log_event("INFO", f"Connected to {hostname}:{port}")
        return True

    # The port never opened
    if not quiet:
        log_event("WARN", f"Failed to connect to {hostname}:{port} after {int(timeout_s)} sec")
    return False
