"""Errors and non-fatal diagnostics raised during amputation."""

import logging
import warnings

logger = logging.getLogger(__name__)


class AmputationError(ValueError):
    """Base class for fatal amputation errors."""


class ConfigurationError(AmputationError):
    """Malformed patterns, weights, odds, frequencies or unsupported tokens."""


class InfeasibleProportionError(AmputationError):
    """Requested proportion of missing cells cannot be reached with the given patterns."""


class DataError(AmputationError):
    """Input data is absent, already incomplete or too narrow."""


class AmputationWarning(UserWarning):
    """Non-fatal diagnostic: the arguments were adjusted and the run continues."""


def warn_diagnostic(message, stacklevel=3):
    """Emit an AmputationWarning and mirror it to the log."""
    warnings.warn(message, AmputationWarning, stacklevel=stacklevel)
    logger.warning(message)
