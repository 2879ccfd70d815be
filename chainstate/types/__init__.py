from .events import LogEvent
from .receipt import Receipt

__all__ = ["LogEvent", "Receipt"]
