"""Proxy-specific UI components."""

import threading
import time

from rich.console import Group
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from socks5_relay.core.lib.proxy_stats import ProxyStats, proxy_stats
from socks5_relay.core.utils.utils import format_bytes, format_duration

from .prompt import PromptHandler, console
from .socks_ui import SocksUI, socks_ui

BANDWIDTH_THRESHOLD = 100  # bytes


class ProxyUI(PromptHandler):
    """UI handler for the proxy server."""

    def __init__(
        self,
        server_ip: str,
        port: int = 1080,
        stats: ProxyStats = proxy_stats,
        sessions: SocksUI = socks_ui,
    ) -> None:
        """Initialize the proxy UI handler.

        Args:
            server_ip: IP address of the proxy server
            port: Port number the proxy server is listening on
            stats: Statistics tracker to display
            sessions: Session tracker to display
        """
        super().__init__()
        self.server_ip = server_ip
        self.port = port
        self.stats = stats
        self.sessions = sessions
        self.running = True
        self._last_bandwidth = 0.0
        self._start_time = time.monotonic()
        self._refresh_rate = 0.5
        self._spinner = Spinner("dots", text="")

    def generate_table(self) -> Table:
        """Generate statistics table."""
        table = self.create_table()

        bandwidth = self.stats.get_bandwidth()
        if abs(bandwidth - self._last_bandwidth) > BANDWIDTH_THRESHOLD:
            self._last_bandwidth = bandwidth

        spinner_text = self._spinner.render(time.monotonic() - self._start_time)

        table.add_row("Bandwidth", f"{spinner_text} {format_bytes(self._last_bandwidth)}/s")
        table.add_row("Active Sessions", str(self.stats.active_connections))
        table.add_row("Total Sessions", str(self.stats.total_connections))
        table.add_row("Client -> Destination", format_bytes(self.stats.total_bytes_sent))
        table.add_row("Destination -> Client", format_bytes(self.stats.total_bytes_received))
        table.add_row("Uptime", format_duration(self.stats.uptime()))
        return table

    def generate_display(self) -> Panel:
        """Generate the main display panel."""
        title = Text(f"SOCKS5 Proxy: {self.server_ip}:{self.port}", style="bold cyan")
        return Panel(
            Group(self.generate_table(), Text(""), self.sessions.generate_table()),
            title=title,
            subtitle="Press Ctrl+C to exit",
            border_style="blue",
            padding=(1, 2),
        )

    def run(self) -> None:
        """Refresh the panel until stopped."""
        console.clear()
        with self.create_live_display(self.generate_display(), refresh_per_second=4) as live:
            while self.running:
                live.update(self.generate_display(), refresh=True)
                time.sleep(self._refresh_rate)

    def stop(self) -> None:
        self.running = False


def create_proxy_ui(host: str, port: int) -> threading.Thread:
    """Create and return UI thread."""
    ui = ProxyUI(host, port)
    return threading.Thread(target=ui.run, name="proxy-ui", daemon=True)
