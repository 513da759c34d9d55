import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from .errors import FavoriteNotFound, FilmNotFound, FilmStorageError
from .models import Film
from .resolvers import resolve_actor_ids, resolve_genre_ids

logger = logging.getLogger(__name__)

# Scalar fields copied from an external film record on import
RECORD_FIELDS = (
    "name",
    "poster_image",
    "description",
    "director",
    "run_time",
    "released",
    "imdb_id",
)

# Scalar fields an editor may overwrite on update
PATCH_FIELDS = (
    "name",
    "poster_image",
    "preview_image",
    "background_image",
    "video_link",
    "preview_video_link",
    "director",
    "background_color",
    "description",
    "run_time",
    "released",
    "imdb_id",
    "status",
)


def _clean_names(patch: dict, key: str) -> list:
    """`patch[key]` must be absent, null or a list of non-empty strings."""
    names = patch.get(key)
    if names is None:
        return []
    if not isinstance(names, list) or not all(isinstance(n, str) and n.strip() for n in names):
        raise ValidationError(f"{key} must be a list of non-empty strings.")
    return names


class FilmService:
    """
    Creates and edits films together with their actors and genres.

    `source` is the external film database, anything with a
    `find_by_id(imdb_id)` method returning a film record dict or None
    (see providers.omdb.OmdbMovieSource).
    """

    def __init__(self, source):
        self.source = source

    def search_film(self, imdb_id: str):
        return self.source.find_by_id(imdb_id)

    def import_by_imdb_id(self, imdb_id: str) -> Film:
        """Fetches the film from the external source and imports it."""
        record = self.search_film(imdb_id)
        if record is None:
            raise FilmNotFound(f"Film {imdb_id} not found in the external database")
        return self.import_film(record)

    def import_film(self, record: dict) -> Film:
        """
        Creates a pending Film from an external record and attaches its
        actors and genres. All writes commit together or not at all.
        Raises FilmStorageError if the transaction was rolled back.
        """
        try:
            with transaction.atomic():
                actor_ids = resolve_actor_ids(record.get("actors"))
                genre_ids = resolve_genre_ids(record.get("genres"))

                film = Film(
                    status=Film.Status.PENDING,
                    **{field: record.get(field) for field in RECORD_FIELDS},
                )
                film.save()

                self._attach_associations(film, actor_ids, genre_ids)
        except DatabaseError as e:
            logger.warning("Film import failed for %s: %s", record.get("imdb_id"), e)
            raise FilmStorageError(f"Film {record.get('imdb_id')} could not be imported") from e

        logger.info("Imported film %s (%s)", film.pk, film.imdb_id)
        return film

    def update_film(self, film: Film, patch: dict) -> Film:
        """
        Overwrites the scalar fields present in `patch` and replaces the
        film's actors (`starring`) and genres (`genre`) with the given names.
        A missing `starring` or `genre` key clears that association.

        Field values are cleaned with the model field (so "2001-12-14" or
        "120" are accepted); bad values raise django ValidationError before
        anything is written.
        """
        starring = _clean_names(patch, "starring")
        genres = _clean_names(patch, "genre")
        changed = self._apply_patch(film, patch)

        try:
            with transaction.atomic():
                actor_ids = resolve_actor_ids(starring)
                genre_ids = resolve_genre_ids(genres)

                if changed:
                    film.save()

                film.actors.set(actor_ids)
                film.genres.set(genre_ids)
        except DatabaseError as e:
            logger.warning("Film update failed for %s: %s", film.pk, e)
            raise FilmStorageError(f"Film {film.pk} could not be updated") from e

        return film

    def _apply_patch(self, film: Film, patch: dict) -> bool:
        changed = False
        for name in PATCH_FIELDS:
            if name not in patch:
                continue
            field = Film._meta.get_field(name)
            value = field.clean(patch[name], film)
            if getattr(film, name) != value:
                setattr(film, name, value)
                changed = True
        return changed

    def _attach_associations(self, film: Film, actor_ids, genre_ids):
        film.actors.add(*actor_ids)
        film.genres.add(*genre_ids)


# -----------------------
# Promo
# -----------------------
def promote(film_id: int) -> Film:
    """
    Makes `film_id` the only promoted film.
    Raises FilmNotFound (nothing changed) or FilmStorageError.
    """
    try:
        with transaction.atomic():
            Film.objects.filter(promo=True).update(promo=False)

            try:
                film = Film.objects.select_for_update().get(pk=film_id)
            except Film.DoesNotExist:
                raise FilmNotFound(f"Film {film_id} not found")

            film.promo = True
            film.save(update_fields=["promo", "updated_at"])
    except DatabaseError as e:
        # Concurrent promotions collide on the single_promo_film constraint
        logger.warning("Promotion of film %s failed: %s", film_id, e)
        raise FilmStorageError(f"Film {film_id} could not be promoted") from e

    logger.info("Film %s is now the promo film", film_id)
    return film


def get_promo():
    return Film.objects.filter(promo=True).first()


# -----------------------
# Favorites
# -----------------------
def is_favorite(film: Film, user) -> bool:
    if not user or not user.is_authenticated:
        return False
    return film.favorited_by.filter(pk=user.pk).exists()


def add_favorite(film: Film, user):
    film.favorited_by.add(user)


def remove_favorite(film: Film, user):
    if not is_favorite(film, user):
        raise FavoriteNotFound()
    film.favorited_by.remove(user)


def favorite_films(user):
    return user.favorite_films.order_by("-released", "id")
