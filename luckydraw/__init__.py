"""Lucky Draw: a browser lottery for drawing winners from a participant list."""

from .draw_engine import draw
from .errors import (
    ConfigurationError,
    ExhaustedPoolError,
    LotteryError,
    NotFoundError,
    ParticipantImportError,
    ValidationError,
)
from .ledger import DrawLedger, DrawRecord, PrizeSnapshot
from .participants import resolve_pool
from .prizes import Prize, PrizeCatalog, resolve_selected
from .session import SessionState

__all__ = [
    "ConfigurationError",
    "DrawLedger",
    "DrawRecord",
    "ExhaustedPoolError",
    "LotteryError",
    "NotFoundError",
    "ParticipantImportError",
    "Prize",
    "PrizeCatalog",
    "PrizeSnapshot",
    "SessionState",
    "ValidationError",
    "draw",
    "resolve_pool",
    "resolve_selected",
]
