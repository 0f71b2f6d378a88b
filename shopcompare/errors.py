# shopcompare/errors.py


class ShopCompareError(Exception):
    """Base class for catalog and profile errors."""


class ValidationError(ShopCompareError, ValueError):
    """A value was rejected when constructing a model."""


class PersistenceError(ShopCompareError):
    """The key-value collaborator could not read or write a snapshot."""
