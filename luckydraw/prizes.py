import logging
from dataclasses import dataclass
from typing import Optional

from .errors import NotFoundError, ValidationError
from .ledger import new_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prize:
    id: str
    name: str
    image_url: Optional[str] = None

    def to_dict(self):
        return {"id": self.id, "name": self.name, "image_url": self.image_url}


def resolve_selected(prize_id, catalog):
    """Return the prize in `catalog` with `prize_id`, or None.

    None is also returned for a prize deleted after it was selected; the
    draw then simply has no prize.
    """
    if prize_id is None:
        return None
    for prize in catalog:
        if prize.id == prize_id:
            return prize
    return None


class PrizeCatalog:
    """Prizes the operator has set up, plus the one currently selected."""

    def __init__(self, prizes=(), selected_id=None):
        self._prizes = list(prizes)
        self.selected_id = selected_id

    def __iter__(self):
        return iter(self._prizes)

    def __len__(self):
        return len(self._prizes)

    @property
    def prizes(self):
        return tuple(self._prizes)

    @property
    def selected(self):
        return resolve_selected(self.selected_id, self._prizes)

    def copy(self):
        return PrizeCatalog(self._prizes, self.selected_id)

    def add(self, name, image_url=None):
        name = (name or "").strip()
        if not name:
            raise ValidationError("Prize name must not be empty.")
        prize = Prize(id=new_id(), name=name, image_url=image_url)
        self._prizes.append(prize)
        logger.info("Added prize %s (%s)", prize.id, prize.name)
        return prize

    def delete(self, prize_id):
        """Remove a prize; clears the selection when it pointed at it."""
        for i, prize in enumerate(self._prizes):
            if prize.id == prize_id:
                del self._prizes[i]
                if self.selected_id == prize_id:
                    self.selected_id = None
                logger.info("Deleted prize %s (%s)", prize.id, prize.name)
                return prize
        raise NotFoundError(f"Prize '{prize_id}' no longer exists.")

    def select(self, prize_id):
        if prize_id is not None and resolve_selected(prize_id, self._prizes) is None:
            raise NotFoundError(f"Prize '{prize_id}' no longer exists.")
        self.selected_id = prize_id
