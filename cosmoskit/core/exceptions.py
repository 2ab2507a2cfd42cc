"""Exceptions raised by the query compiler and the document access layer.

Store and transport failures coming out of azure-cosmos are never wrapped;
only a missing document is translated, into `DocumentNotFoundError`.
"""
from __future__ import annotations


class CosmosKitError(Exception):
    """Base class for every error raised by cosmoskit itself."""


class CosmosValidationError(CosmosKitError, ValueError):
    """A required identifier or an input value was rejected before any store call."""

    @classmethod
    def blank(cls, what: str) -> "CosmosValidationError":
        return cls(f"{what} must be non-blank")


class QueryValidationError(CosmosValidationError):
    """Filter, field path or pagination input that cannot be compiled safely."""


class QueryConfigurationError(CosmosKitError, ValueError):
    """Sort configuration that the query language cannot express (e.g. direction 'UP')."""

    @classmethod
    def from_direction(cls, path: str, direction: object) -> "QueryConfigurationError":
        return cls(f"Order must be ASC or DESC. provided: {direction!r} for field '{path}'")


class DocumentNotFoundError(CosmosKitError):
    """The store answered 404 for a document, collection or database link.

    Attributes
    ----------
    link : str
        The resource link that was not found.
    status_code : int
        Always 404.
    """

    status_code = 404

    def __init__(self, link: str, original_error: Exception | None = None):
        super().__init__(f"Resource Not Found: {link}")
        self.link = link
        self.original_error = original_error
