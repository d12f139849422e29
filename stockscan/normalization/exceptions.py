class NormalizationError(Exception):
    """Raised when an extraction payload cannot be normalized."""


class PayloadValidationError(NormalizationError):
    """Raised when a raw payload does not have the expected overall shape."""
