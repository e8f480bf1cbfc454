"""Session state for one operator, and the reducers that change it.

`SessionState` is frozen. Every reducer takes a state and returns a new one;
the ledger and prize catalog are copied before they are changed, so a state
that has been handed out never changes underneath its holder.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from . import config
from .draw_engine import check_count, draw
from .errors import ConfigurationError, ExhaustedPoolError, LotteryError, ValidationError
from .ledger import DrawLedger
from .participants import clean_names, merge_participants, resolve_pool, split_participants
from .preview import rolling_interval
from .prizes import PrizeCatalog

logger = logging.getLogger(__name__)

SETTINGS_PAGE = 'settings'
LOTTERY_PAGE = 'lottery'

SETTING_FIELDS = (
    'title',
    'subtitle',
    'participants_text',
    'winner_count',
    'rolling_speed',
    'exclude_previous_winners',
)
TEXT_FIELDS = ('title', 'subtitle', 'participants_text', 'rolling_speed')


@dataclass(frozen=True)
class SessionState:
    title: str = config.DEFAULT_TITLE
    subtitle: str = config.DEFAULT_SUBTITLE
    participants_text: str = ''
    winner_count: int = config.DEFAULT_WINNER_COUNT
    rolling_speed: str = config.DEFAULT_ROLLING_SPEED
    exclude_previous_winners: bool = False
    background_image: Optional[str] = None
    prizes: PrizeCatalog = field(default_factory=PrizeCatalog)
    history: DrawLedger = field(default_factory=DrawLedger)
    page: str = SETTINGS_PAGE

    @property
    def participants(self):
        return split_participants(self.participants_text)

    def to_dict(self):
        try:
            pool_size = len(drawable_pool(self))
            exhausted = False
        except ConfigurationError:
            pool_size, exhausted = 0, False
        except ExhaustedPoolError:
            pool_size, exhausted = 0, True
        return {
            'title': self.title,
            'subtitle': self.subtitle,
            'participants_text': self.participants_text,
            'participant_count': len(self.participants),
            'pool_size': pool_size,
            'pool_exhausted': exhausted,
            'winner_count': self.winner_count,
            'rolling_speed': self.rolling_speed,
            'exclude_previous_winners': self.exclude_previous_winners,
            'background_image': self.background_image,
            'prizes': [p.to_dict() for p in self.prizes],
            'selected_prize_id': self.prizes.selected_id,
            'history': [r.to_dict() for r in self.history.newest_first()],
            'page': self.page,
        }


# ---------- settings ----------

def update_settings(state, **changes):
    unknown = set(changes) - set(SETTING_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown setting(s): {', '.join(sorted(unknown))}.")
    for key in ('title', 'subtitle', 'participants_text'):
        if key in changes and changes[key] is None:
            changes[key] = ''
    for key in TEXT_FIELDS:
        if key in changes and not isinstance(changes[key], str):
            raise ValidationError(f"{key} must be text.")
    if 'rolling_speed' in changes:
        rolling_interval(changes['rolling_speed'])
    if 'winner_count' in changes:
        count = changes['winner_count']
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValidationError("Number of winners must be a whole number.")
    if 'exclude_previous_winners' in changes:
        if not isinstance(changes['exclude_previous_winners'], bool):
            raise ValidationError("exclude_previous_winners must be true or false.")
    return replace(state, **changes)


def set_participants(state, text):
    return replace(state, participants_text=text or '')


def import_participants(state, names):
    """Merge names read from a spreadsheet into the participant list."""
    merged = merge_participants(state.participants_text, names)
    added = len(split_participants(merged)) - len(state.participants)
    logger.info("Imported %d new participant(s)", added)
    return replace(state, participants_text=merged)


def set_background_image(state, data_url):
    return replace(state, background_image=data_url)


# ---------- prizes ----------

def add_prize(state, name, image_url=None):
    catalog = state.prizes.copy()
    catalog.add(name, image_url)
    return replace(state, prizes=catalog)


def delete_prize(state, prize_id):
    catalog = state.prizes.copy()
    catalog.delete(prize_id)
    return replace(state, prizes=catalog)


def select_prize(state, prize_id):
    catalog = state.prizes.copy()
    catalog.select(prize_id)
    return replace(state, prizes=catalog)


# ---------- drawing ----------

def drawable_pool(state):
    """The pool the next draw picks from.

    Raises ConfigurationError with no participants, ExhaustedPoolError when
    exclusion has removed everyone.
    """
    names = state.participants
    if not names:
        raise ConfigurationError("Please add participants first.")
    return resolve_pool(names, state.history, state.exclude_previous_winners)


def check_ready(state):
    """Validate the session for a draw and return `(pool, prize)`."""
    pool = drawable_pool(state)
    check_count(pool, state.winner_count)
    prize = state.prizes.selected
    if len(state.prizes) and prize is None:
        raise ConfigurationError("Please select a prize for this draw.")
    return pool, prize


def open_lottery(state):
    try:
        check_ready(state)
    except LotteryError as e:
        logger.warning("Cannot open the lottery screen: %s", e)
        raise
    return replace(state, page=LOTTERY_PAGE)


def close_lottery(state):
    return replace(state, page=SETTINGS_PAGE)


def commit_draw(state, winners, prize=None):
    """Record an already-drawn winner list; returns `(state, record)`."""
    history = state.history.copy()
    record = history.record(winners, prize)
    return replace(state, history=history), record


def run_draw(state, rng=None):
    """Validate, draw and record in one step; returns `(state, record)`."""
    pool, prize = check_ready(state)
    winners = draw(pool, state.winner_count, rng)
    return commit_draw(state, winners, prize)


def edit_draw(state, draw_id, winners):
    """Replace a past draw's winners. Not checked against the current pool."""
    if isinstance(winners, str):
        winners = winners.splitlines()
    if not isinstance(winners, (list, tuple)):
        raise ValidationError("Winners must be a list of names or newline-separated text.")
    history = state.history.copy()
    record = history.edit(draw_id, clean_names(winners))
    return replace(state, history=history), record


def reset_history(state):
    history = state.history.copy()
    history.reset()
    return replace(state, history=history)
