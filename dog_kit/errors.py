from __future__ import annotations


class DogKitError(Exception):
    """Base class for detector errors."""


class ModelLoadError(DogKitError):
    """The model artifact could not be parsed or loaded. Raised at construction only."""


class InferenceError(DogKitError):
    """
    The native inference call failed for this frame and will not be retried again.

    `preprocess_ms` keeps the time already spent preparing the input so the
    facade can still report it.
    """

    def __init__(self, message: str, *, preprocess_ms: float = 0.0):
        super().__init__(message)
        self.preprocess_ms = preprocess_ms


class OutputDecodeError(DogKitError, ValueError):
    """Raw model output does not look like a [1, A, B] detection tensor."""
