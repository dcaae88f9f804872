"""Error taxonomy for the scheduling engine."""


class SchedulingError(Exception):
    """Base class for every error raised by the engine."""


class ConfigError(SchedulingError):
    """
    A deck configuration is malformed.

    Raised when a scheduler is constructed, never per card.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class InvalidRatingError(SchedulingError):
    """The caller passed a rating outside 1-4."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Rating must be 1 (Again) to 4 (Easy), got {rating!r}")


class InvalidCardStateError(SchedulingError):
    """A card reached a branch its state does not allow."""

    def __init__(self, card_id: int, message: str):
        self.card_id = card_id
        super().__init__(f"Card {card_id}: {message}")
