import logging
from datetime import datetime
from typing import Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


OMDB_BASE_URL = "https://www.omdbapi.com/"
OMDB_EMPTY = "N/A"


class OmdbProviderError(Exception):
    pass


def _clean(value):
    """OMDb answers "N/A" for every missing field."""
    if value is None or value == OMDB_EMPTY:
        return None
    return value


def _split_names(value):
    value = _clean(value)
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_run_time(value):
    """Parses "142 min" into 142."""
    value = _clean(value)
    if not value:
        return None
    digits = value.split(" ", 1)[0]
    return int(digits) if digits.isdigit() else None


def _parse_released(value):
    """Parses "14 Oct 1994" into date(1994, 10, 14)."""
    value = _clean(value)
    if not value:
        return None
    try:
        return datetime.strptime(value, "%d %b %Y").date()
    except ValueError:
        logger.warning("Unparseable OMDb release date: %s", value)
        return None


def parse_movie(movie: dict) -> dict:
    """
    Maps an OMDb movie payload to a film record:
    {
      name, poster_image, description, director, run_time, released,
      imdb_id, actors: [str], genres: [str]
    }
    """
    return {
        "name": movie.get("Title") or "",
        "poster_image": _clean(movie.get("Poster")),
        "description": _clean(movie.get("Plot")),
        "director": _clean(movie.get("Director")),
        "run_time": _parse_run_time(movie.get("Runtime")),
        "released": _parse_released(movie.get("Released")),
        "imdb_id": movie.get("imdbID"),
        "actors": _split_names(movie.get("Actors")),
        "genres": _split_names(movie.get("Genre")),
    }


class OmdbMovieSource:
    """External film source backed by the OMDb API (https://www.omdbapi.com/)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else getattr(settings, "OMDB_API_KEY", "")
        self.base_url = base_url or getattr(settings, "OMDB_BASE_URL", OMDB_BASE_URL)
        self.timeout = timeout or getattr(settings, "OMDB_TIMEOUT", 15)

    def _require_key(self):
        if not self.api_key:
            raise OmdbProviderError("OMDB_API_KEY is missing in settings.")

    def find_by_id(self, imdb_id: str):
        """
        Returns the film record for `imdb_id`, or None when OMDb does not
        know the film.
        Raises OmdbProviderError if the request itself goes wrong.
        """
        self._require_key()

        if not imdb_id:
            raise OmdbProviderError("imdb_id is required")

        params = {
            "apikey": self.api_key,
            "i": imdb_id,
            "plot": "full",
        }

        try:
            r = requests.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("OMDb request failed: %s", e)
            raise OmdbProviderError(f"OMDb request failed: {e}") from e

        if r.status_code != 200:
            raise OmdbProviderError(f"OMDb error: {r.status_code} {r.text[:200]}")

        try:
            data = r.json()
        except ValueError as e:
            raise OmdbProviderError(f"OMDb returned invalid JSON: {e}") from e

        if data.get("Response") == "False":
            logger.info("OMDb has no film %s: %s", imdb_id, data.get("Error"))
            return None

        return parse_movie(data)
