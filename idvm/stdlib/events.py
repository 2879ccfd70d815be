"""Event emission: `emit(b"Name", {"field": value, ...})`."""

from __future__ import annotations

from idvm.runtime.events_api import emit

__all__ = ["emit"]
