"""
Film listing queries built from untrusted request parameters.

Building is split in two steps:

- build_film_query() turns request parameters and the caller's role into an
  immutable FilmQuery. It never touches the database.
- execute_film_query() turns a FilmQuery into a Film queryset.

Only allowlisted sort keys, directions and statuses make it into a FilmQuery,
and the ORM binds every value as a query parameter.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from django.db.models import Avg, F

from .errors import GenreNotFound, InvalidFilmQuery
from .models import Film, Genre

DEFAULT_STATUS = Film.Status.READY
DEFAULT_ORDER_BY = "released"
DEFAULT_ORDER_TO = "desc"

ORDER_BY_RATING = "rating"
ORDER_BY_CHOICES = ("released", ORDER_BY_RATING)
ORDER_TO_CHOICES = ("asc", "desc")


@dataclass(frozen=True)
class FilmQuery:
    status: str = DEFAULT_STATUS
    order_by: str = DEFAULT_ORDER_BY
    order_to: str = DEFAULT_ORDER_TO
    genre: Optional[str] = None


def _param(params: Mapping, name: str):
    value = params.get(name)
    if value is None or value == "":
        return None
    return value


def build_film_query(params: Mapping, is_moderator: bool = False) -> FilmQuery:
    """
    Defaults: only "ready" films, newest release first.

    - `status` is honoured for moderators only; everyone else always gets
      "ready" films.
    - `order_to` and `order_by` replace the default direction and sort key.
    - `genre` restricts the listing to films of the genre with that title.

    Raises InvalidFilmQuery for values outside the allowlists.
    """
    status = DEFAULT_STATUS
    order_by = DEFAULT_ORDER_BY
    order_to = DEFAULT_ORDER_TO

    requested_status = _param(params, "status")
    if is_moderator and requested_status is not None:
        if requested_status not in Film.Status.values:
            raise InvalidFilmQuery(f"Unknown status: {requested_status}")
        status = requested_status

    requested_order_to = _param(params, "order_to")
    if requested_order_to is not None:
        if requested_order_to not in ORDER_TO_CHOICES:
            raise InvalidFilmQuery(f"order_to must be one of {', '.join(ORDER_TO_CHOICES)}")
        order_to = requested_order_to

    requested_order_by = _param(params, "order_by")
    if requested_order_by is not None:
        if requested_order_by not in ORDER_BY_CHOICES:
            raise InvalidFilmQuery(f"order_by must be one of {', '.join(ORDER_BY_CHOICES)}")
        order_by = requested_order_by

    return FilmQuery(
        status=status,
        order_by=order_by,
        order_to=order_to,
        genre=_param(params, "genre"),
    )


def execute_film_query(query: FilmQuery):
    """Raises GenreNotFound when `query.genre` names no genre."""
    qs = Film.objects.filter(status=query.status)

    if query.genre is not None:
        try:
            genre = Genre.objects.get(title=query.genre)
        except Genre.DoesNotExist:
            raise GenreNotFound(f"Genre not found: {query.genre}")
        qs = qs.filter(pk__in=genre.films.values("pk"))

    if query.order_by == ORDER_BY_RATING:
        qs = qs.annotate(rating=Avg("comments__rating"))

    # Films without a release date or comments sort as lowest
    key = F(query.order_by)
    if query.order_to == "asc":
        ordering = key.asc(nulls_first=True)
    else:
        ordering = key.desc(nulls_last=True)

    return qs.order_by(ordering, "id")


def films_for_request(params: Mapping, user=None):
    is_moderator = bool(user and user.is_authenticated and user.is_moderator)
    return execute_film_query(build_film_query(params, is_moderator))
