class ExtractionError(Exception):
    """Base exception for terminal extraction failures."""


class NoDataError(ExtractionError):
    """Raised when local stages found nothing and remote analysis cannot be used."""


class RemoteExtractionError(ExtractionError):
    """Raised when every configured remote provider failed."""


class ExtractionValidationError(ExtractionError):
    """Raised when no valid rows or items remain after every stage."""
