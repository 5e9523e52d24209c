"""Exception and warning types raised by the training pipeline."""


class LabError(Exception):
    """Base class for every error raised by the lab pipeline."""


class InvalidConfiguration(LabError):
    """The requested run cannot start with the given data or settings."""


class ConcurrentRunError(InvalidConfiguration):
    """A trainer was asked to start while one of its runs is still active."""


class TrainingFailure(LabError):
    """A run aborted mid-way; `history` holds the snapshots collected so far."""

    def __init__(self, message: str, history: list | None = None):
        super().__init__(message)
        self.history = list(history or [])


class EmptySplitWarning(UserWarning):
    """Validation or test split is empty, dependent metrics are reported as None."""
