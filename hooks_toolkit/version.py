"""
Version helpers for hooks-toolkit.
We keep a static __version__ (PEP 440); the CLI and the RPC client's
User-Agent read it from here.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.1.0"


def user_agent() -> str:
    return f"hooks-toolkit-py/{__version__}"


__all__ = ["__version__", "user_agent"]
