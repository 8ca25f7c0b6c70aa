#file: backend/errors.py


class ValidationError(Exception):
    """Bad coordinate input, surfaced to the client as 400."""


class MissingParameter(ValidationError):
    pass


class NotANumber(ValidationError):
    pass


class OutOfRange(ValidationError):
    pass


class ProviderFailure(Exception):
    """One upstream provider could not supply usable data."""

    def __init__(self, provider: str, reason: str):
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


class NoDataAvailable(Exception):
    """Every provider in the chain failed for a coordinate."""


class UpstreamError(Exception):
    """A single-source upstream (weather, archives) failed or sent a malformed body."""
