"""Error taxonomy shared by every layer.

Pure components raise these before any mutation; adapters translate their
own failures into ``StoreUnavailable``.
"""


class MedaceError(Exception):
    """Base class for all medace errors."""


class InvalidRating(MedaceError, ValueError):
    """A rating outside {0, 1, 2, 3} reached the API boundary."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Rating must be one of 0, 1, 2, 3 (got {rating!r})")


class NotFound(MedaceError, LookupError):
    """A word or book addressed by id does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class StoreUnavailable(MedaceError):
    """The card record store could not be reached or returned an error.

    Recoverable: callers may retry the whole operation.
    """
