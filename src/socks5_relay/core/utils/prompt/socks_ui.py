"""SOCKS session tracking for the UI."""

import threading
import time

from rich.table import Table

from socks5_relay.core.utils.prompt.prompt import PromptHandler
from socks5_relay.core.utils.utils import format_duration

MAX_ROWS = 10


class SocksUI(PromptHandler):
    """Tracks live sessions (client address, destination, start time)."""

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._active_connections: dict[tuple, tuple[float, str | None]] = {}

    def connection_started(self, addr: tuple) -> None:
        """Record a newly accepted client."""
        with self._lock:
            self._active_connections[addr] = (time.monotonic(), None)

    def destination_connected(self, addr: tuple, destination: str) -> None:
        """Record the destination once CONNECT succeeded."""
        with self._lock:
            if addr in self._active_connections:
                started, _ = self._active_connections[addr]
                self._active_connections[addr] = (started, destination)

    def connection_ended(self, addr: tuple) -> None:
        with self._lock:
            self._active_connections.pop(addr, None)

    def active_sessions(self) -> list[tuple[tuple, str | None, float]]:
        """Return (client address, destination, duration) for every live session, oldest first."""
        now = time.monotonic()
        with self._lock:
            items = list(self._active_connections.items())
        return sorted(((addr, dest, now - started) for addr, (started, dest) in items), key=lambda s: -s[2])

    def generate_table(self) -> Table:
        """Generate the live sessions table."""
        table = self.create_table()
        sessions = self.active_sessions()
        for addr, dest, duration in sessions[:MAX_ROWS]:
            table.add_row(f"{addr[0]}:{addr[1]} -> {dest or 'negotiating'}", format_duration(duration))
        if len(sessions) > MAX_ROWS:
            table.add_row(f"... {len(sessions) - MAX_ROWS} more", "")
        return table


# Global UI instance
socks_ui = SocksUI()
