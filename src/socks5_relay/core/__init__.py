"""Core proxy server implementation.

This package contains the core components of the SOCKS5 server:
- Method negotiation and username/password authentication
- CONNECT request handling and the byte relay
- Threaded server implementation
- Configuration and exceptions
- Statistics tracking and user interface components

The command-line interface lives in ``socks5_relay.cmd`` and only talks to
this package through ``socks5_relay.core.proxy``.
"""
