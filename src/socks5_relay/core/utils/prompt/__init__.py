"""Terminal UI: live statistics panel and session tracking."""

from socks5_relay.core.utils.prompt.prompt import PromptHandler, console
from socks5_relay.core.utils.prompt.proxy_ui import ProxyUI, create_proxy_ui
from socks5_relay.core.utils.prompt.socks_ui import SocksUI, socks_ui

__all__ = ["console", "create_proxy_ui", "PromptHandler", "ProxyUI", "SocksUI", "socks_ui"]
