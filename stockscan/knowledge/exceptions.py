class InventoryFormatError(ValueError):
    """Raised when an inventory export cannot be read into items, transactions and partners."""
