"""toolhost: serve provider-declared tools over JSON-RPC and SSE."""

from .utils.env import load_env

# config.py reads TOOLHOST_* at import time.
load_env()

__version__ = "1.0.0"
