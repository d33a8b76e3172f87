"""Statistics tracking and monitoring for the SOCKS proxy server.

This module provides real-time statistics tracking for the proxy server, including:
- Active session counting
- Bandwidth monitoring
- Per-direction transfer totals
- Historical bandwidth data

The statistics are updated from every handler and relay thread, so all
mutations are serialized with a lock.

Example:
    # Global stats object is automatically created
    from .proxy_stats import proxy_stats

    # Track new session
    proxy_stats.connection_started()

    # Bytes copied client -> destination
    proxy_stats.update_bytes(sent=1024, received=0)
"""

import threading
import time
from collections import deque
from datetime import UTC, datetime

BANDWIDTH_WINDOW = 5  # Seconds


class ProxyStats:
    """Thread-safe statistics tracker for SOCKS proxy server.

    ``total_bytes_sent`` counts bytes relayed from clients to destinations,
    ``total_bytes_received`` counts bytes relayed back to clients.
    """

    def __init__(self) -> None:
        self.active_connections = 0
        self.total_connections = 0
        self.total_bytes_sent = 0
        self.total_bytes_received = 0
        self.bandwidth_history: deque[tuple[int, float]] = deque()
        self.start_time = datetime.now(tz=UTC)
        self._lock = threading.Lock()

    def update_bytes(self, sent: int, received: int) -> None:
        """Update byte transfer statistics.

        Args:
            sent: Number of bytes relayed to a destination
            received: Number of bytes relayed to a client
        """
        with self._lock:
            self.total_bytes_sent += sent
            self.total_bytes_received += received
            now = time.time()
            self.bandwidth_history.append((sent + received, now))
            self._prune(now)

    def get_bandwidth(self) -> float:
        """Calculate current bandwidth usage in bytes per second.

        Returns:
            float: Average bandwidth over the last ``BANDWIDTH_WINDOW`` seconds
        """
        with self._lock:
            self._prune(time.time())
            total_bytes = sum(bytes_ for bytes_, _ in self.bandwidth_history)
            return total_bytes / BANDWIDTH_WINDOW

    def _prune(self, now: float) -> None:
        # Caller holds the lock, entries are appended in time order
        cutoff = now - BANDWIDTH_WINDOW
        while self.bandwidth_history and self.bandwidth_history[0][1] <= cutoff:
            self.bandwidth_history.popleft()

    def connection_started(self) -> None:
        """Increment the active connection counter."""
        with self._lock:
            self.active_connections += 1
            self.total_connections += 1

    def connection_ended(self) -> None:
        """Decrement the active connection counter."""
        with self._lock:
            self.active_connections -= 1

    def uptime(self) -> float:
        return (datetime.now(tz=UTC) - self.start_time).total_seconds()


# Global statistics object
proxy_stats = ProxyStats()
