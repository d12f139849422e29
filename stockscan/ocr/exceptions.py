class LocalOcrError(Exception):
    """Raised on hard local OCR failures (engine missing, I/O errors).

    Finding no text is not an error.
    """
