"""Catalog service exceptions."""


class InvalidTrackError(ValueError):
    """Track or row is missing required input.

    ``field`` names what is missing so callers can report it.
    """

    def __init__(self, field: str, message: str = None):
        self.field = field
        super().__init__(message or f"Missing required field: {field}")
