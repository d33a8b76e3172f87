"""Command line interface modules.

This package provides the command-line tools for:
- Starting the SOCKS5 proxy server
- Listing the interfaces the server can bind to
- Showing version information

The command modules translate options and environment variables into a
``ProxyConfig`` and hand it to the core server.
"""
