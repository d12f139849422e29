class PreprocessingError(Exception):
    """Raised when a raw file cannot be turned into a processed document."""
