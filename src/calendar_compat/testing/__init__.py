"""Reference collaborators for tests and the command line.

Nothing here depends on pytest, so these helpers can be imported from any
test tree or tool.
"""

from __future__ import annotations

from calendar_compat.testing.reference import (
    GregorianAuthority,
    InMemoryHost,
    ManualScheduler,
)

__all__ = ["GregorianAuthority", "InMemoryHost", "ManualScheduler"]
