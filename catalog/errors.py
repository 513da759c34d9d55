"""Errors raised by the catalog services.

Each error carries the HTTP status the views answer with, so callers get a
typed failure instead of a raw database exception.
"""

from typing import Optional


class CatalogError(Exception):
    status_code = 500
    default_message = "Catalog error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotFoundError(CatalogError):
    status_code = 404
    default_message = "Not found"


class FilmNotFound(NotFoundError):
    default_message = "Film not found"


class GenreNotFound(NotFoundError):
    default_message = "Genre not found"


class FavoriteNotFound(NotFoundError):
    status_code = 422
    default_message = "Film is not in the favorites list"


class FilmStorageError(CatalogError):
    """A write transaction failed and was rolled back."""

    status_code = 500
    default_message = "Film could not be saved"


class InvalidFilmQuery(CatalogError):
    status_code = 400
    default_message = "Invalid film query parameter"
