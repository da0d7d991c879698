class InsightEdError(Exception):
    """Base class for errors surfaced to the person filling in a form."""


class ValidationError(InsightEdError):
    """A required field is missing; nothing was looked up or sent."""


class SchoolNotFound(InsightEdError):
    def __init__(self, school_id: str):
        self.school_id = school_id
        super().__init__(f'School ID "{school_id}" not found.')


class ReferenceDataError(InsightEdError):
    """The reference dataset cannot be used for lookups."""


class TransportError(InsightEdError):
    """The submission sink could not be reached or refused the record."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class EnvironmentRefusal(InsightEdError):
    """A sync pass was requested while the device is offline."""


class SyncInProgress(InsightEdError):
    """A sync pass was requested while another one is still running."""
