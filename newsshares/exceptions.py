"""
Error Taxonomy
==============

Exceptions raised by the weekday analysis pipeline.

All errors derive from NewsSharesError, which is a ValueError so callers
that already catch ValueError keep working.
"""


class NewsSharesError(ValueError):
    """Base class for pipeline errors."""


class InvalidParameter(NewsSharesError):
    """A caller-supplied parameter is not recognized (e.g. weekday name)."""


class InsufficientData(NewsSharesError):
    """Too few rows to filter, split or cross-validate."""


class DataValidationError(NewsSharesError):
    """The loaded table does not satisfy the dataset schema."""


class ModelFitFailure(NewsSharesError):
    """A model could not be fitted (degenerate design, no viable grid cell)."""


class PredictionFailure(NewsSharesError):
    """A fitted model could not score every test row."""


class TrainingCancelled(NewsSharesError):
    """Training was aborted through a CancellationToken."""
