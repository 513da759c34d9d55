import random
from typing import Optional

from django.conf import settings

from .errors import FilmNotFound
from .models import Film

SUMMARY_FIELDS = ("id", "name", "poster_image", "preview_video_link")


def similar_films(
    film_id: int,
    count: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> list:
    """
    Picks up to `count` random ready films sharing at least one genre with
    `film_id`, as summary dicts (id, name, poster_image, preview_video_link).

    Every genre contributes at most `count` random candidates; candidates are
    de-duplicated and sampled. When fewer than `count` films qualify, all of
    them are returned.
    """
    if count is None:
        count = getattr(settings, "CATALOG_SIMILAR_FILMS_COUNT", 4)
    rng = rng or random

    try:
        film = Film.objects.get(pk=film_id)
    except Film.DoesNotExist:
        raise FilmNotFound(f"Film {film_id} not found")

    candidates = {}
    for genre in film.genres.all():
        films = (
            genre.films.filter(status=Film.Status.READY)
            .exclude(pk=film.pk)
            .order_by("?")
            .values(*SUMMARY_FIELDS)[:count]
        )
        for summary in films:
            candidates.setdefault(summary["id"], summary)

    # Sort first so a seeded rng gives a stable sample
    pool = sorted(candidates.values(), key=lambda summary: summary["id"])
    return rng.sample(pool, min(count, len(pool)))
