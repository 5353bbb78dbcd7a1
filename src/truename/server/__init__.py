"""HTTP server for TrueName."""

from truename.server.app import TrueNameServer, create_app
from truename.server.runner import ServerRunner

__all__ = [
    "ServerRunner",
    "TrueNameServer",
    "create_app",
]
