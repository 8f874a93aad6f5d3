"""Zone snapshot state."""

from autowaybler.state.store import ZoneStore

__all__ = ["ZoneStore"]
