"""Draw history: one record per completed draw, oldest first."""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Tuple

from .errors import NotFoundError

logger = logging.getLogger(__name__)


def new_id():
    return uuid.uuid4().hex


@dataclass(frozen=True)
class PrizeSnapshot:
    """Display fields of a prize, copied into a record when it is created."""

    name: str
    image_url: Optional[str] = None

    @classmethod
    def of(cls, prize):
        if prize is None:
            return None
        return cls(name=prize.name, image_url=prize.image_url)

    def to_dict(self):
        return {"name": self.name, "image_url": self.image_url}


@dataclass(frozen=True)
class DrawRecord:
    id: str
    winners: Tuple[str, ...]
    prize: Optional[PrizeSnapshot]
    timestamp: datetime
    editable: bool = True

    def to_dict(self):
        return {
            "id": self.id,
            "winners": list(self.winners),
            "prize": self.prize.to_dict() if self.prize else None,
            "timestamp": self.timestamp.isoformat(),
            "editable": self.editable,
        }


class DrawLedger:
    """Append-only list of DrawRecords.

    Only `edit` may change an existing record, and only its winners.
    """

    def __init__(self, records=()):
        self._records = list(records)

    def __iter__(self):
        return iter(self._records)

    def __len__(self):
        return len(self._records)

    @property
    def records(self):
        return tuple(self._records)

    def newest_first(self):
        return list(reversed(self._records))

    def winner_names(self):
        """Union of winners over every record currently in history."""
        names = set()
        for record in self._records:
            names.update(record.winners)
        return names

    def get(self, draw_id):
        for record in self._records:
            if record.id == draw_id:
                return record
        raise NotFoundError(f"Draw record '{draw_id}' no longer exists.")

    def copy(self):
        return DrawLedger(self._records)

    def record(self, winners, prize=None, timestamp=None):
        """Append a new record for a completed draw and return it.

        `prize` may be a catalog Prize or a PrizeSnapshot; either way only its
        display fields are stored.
        """
        if prize is not None and not isinstance(prize, PrizeSnapshot):
            prize = PrizeSnapshot.of(prize)
        record = DrawRecord(
            id=new_id(),
            winners=tuple(winners),
            prize=prize,
            timestamp=timestamp or datetime.now(timezone.utc),
            editable=True,
        )
        self._records.append(record)
        logger.info("Recorded draw %s: %d winner(s), prize=%s",
                    record.id, len(record.winners), prize.name if prize else None)
        return record

    def edit(self, draw_id, new_winners):
        """Replace the winners of `draw_id` in place; nothing else changes."""
        for i, record in enumerate(self._records):
            if record.id == draw_id:
                updated = replace(record, winners=tuple(new_winners))
                self._records[i] = updated
                logger.info("Edited draw %s: winners now %s", draw_id, list(updated.winners))
                return updated
        logger.warning("Edit rejected, unknown draw id %s", draw_id)
        raise NotFoundError(f"Draw record '{draw_id}' no longer exists.")

    def reset(self):
        logger.info("Draw history cleared (%d record(s) removed)", len(self._records))
        self._records.clear()
