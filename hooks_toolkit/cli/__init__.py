"""Command line entry point for hooks-toolkit (`hooks-toolkit build|deploy|hook-on`).

A thin wrapper over the library: every command resolves settings, builds
the collaborators and calls into `toolchain`, `deploy` and `payload`.
"""

from __future__ import annotations

__all__ = ["main"]
