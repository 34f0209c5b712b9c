from typing import Optional


class InvalidCardData(ValueError):
    """Raw upstream payload could not be turned into a canonical record."""

    def __init__(self, entity: str, reason: Optional[str] = None):
        self.entity = entity
        self.reason = reason
        message = f"Invalid {entity} data"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
