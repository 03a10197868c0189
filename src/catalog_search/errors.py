"""Exceptions raised by the catalog search core."""


class CatalogSearchError(Exception):
    """Base class for all catalog search errors."""

    pass


class ConnectionFailure(CatalogSearchError):
    """The vector store could not be reached. Fatal during startup."""

    pass


class ModelLoadFailure(CatalogSearchError):
    """The embedding model could not be loaded. Fatal during startup."""

    pass


class ModelNotReady(CatalogSearchError):
    """The embedding model has not finished loading; retry shortly."""

    def __init__(self, message: str = "AI Model is not ready yet. Please wait a moment."):
        super().__init__(message)


QueryNotReady = ModelNotReady


class InferenceFailure(CatalogSearchError):
    """The embedding model failed while encoding a text."""

    pass


class SchemaCreateConflict(CatalogSearchError):
    """An index with the requested name already exists."""

    pass


class IndexSetupFailure(CatalogSearchError):
    """The index could not be created or dropped. Fatal during startup."""

    pass


class SeedItemFailure(CatalogSearchError):
    """Seeding stopped at the first catalog entry that could not be stored."""

    def __init__(self, key: str, cause: Exception):
        super().__init__(f"Failed to seed catalog entry '{key}': {cause}")
        self.key = key
        self.cause = cause


class SearchFailure(CatalogSearchError):
    """A KNN query failed inside the vector store."""

    pass


class VectorEncodingError(CatalogSearchError, ValueError):
    """A vector does not match the element type or dimension of the index."""

    pass
