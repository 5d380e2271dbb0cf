class CatalogRankerError(Exception):
    """Base exception for the project."""

class DataLoadError(CatalogRankerError):
    """Raised when catalog / taxonomy JSON files cannot be loaded."""

class InvalidArgumentError(CatalogRankerError):
    """Raised when a caller passes arguments the engine cannot rank with."""

class ProductNotFoundError(InvalidArgumentError):
    """Raised when a focal product id is not part of the catalog snapshot."""
