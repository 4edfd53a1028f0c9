"""Exception types raised by toodles.

Store and LLM transport failures are wrapped so callers can tell a failed
turn apart from a programming error.
"""


class ToodlesError(Exception):
    """Base exception for toodles."""


class StoreError(ToodlesError):
    """A persistence backend could not complete an operation.

    Raised for connectivity loss, constraint violations and expired
    deadlines. The original driver exception is chained as ``__cause__``.
    """


class ClassificationError(ToodlesError, ValueError):
    """The sentiment classifier returned a label outside the known set."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Unexpected sentiment label: {label!r}")


class GenerationError(ToodlesError):
    """The language model call failed."""
