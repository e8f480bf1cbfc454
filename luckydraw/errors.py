"""Errors raised by the draw engine and session reducers.

Every error is recoverable: the web layer reports the message to the
operator and the session keeps running.
"""


class LotteryError(Exception):
    """Base class for all operator-facing errors."""

    status_code = 400


class ConfigurationError(LotteryError):
    """Drawing is blocked until the operator fixes the settings."""


class ValidationError(ConfigurationError):
    """An input is outside the bounds an operation accepts."""


class ExhaustedPoolError(LotteryError):
    """Every configured participant has already won and exclusion is on."""

    status_code = 409


class ParticipantImportError(LotteryError):
    """A spreadsheet yielded no usable participant names."""


class NotFoundError(LotteryError):
    """A draw or prize id no longer exists."""

    status_code = 404
