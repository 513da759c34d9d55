import json
import logging
from functools import wraps

from django.core.exceptions import ValidationError
from django.db.models import Avg, Count
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .errors import CatalogError, FilmNotFound
from .models import Film, Genre
from .providers.omdb import OmdbMovieSource, OmdbProviderError
from .queries import films_for_request
from .services import (
    FilmService,
    add_favorite,
    favorite_films,
    get_promo,
    is_favorite,
    promote,
    remove_favorite,
)
from .similar import similar_films

logger = logging.getLogger(__name__)


def get_film_service():
    return FilmService(OmdbMovieSource())


def error_response(error: CatalogError):
    return JsonResponse({"error": error.message}, status=error.status_code)


def catalog_errors(view):
    """Turns CatalogError into a JSON error response."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except CatalogError as e:
            return error_response(e)

    return wrapper


def login_required_json(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Authentication required"}, status=401)
        return view(request, *args, **kwargs)

    return wrapper


def moderator_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Authentication required"}, status=401)
        if not request.user.is_moderator:
            return JsonResponse({"error": "Moderator rights required"}, status=403)
        return view(request, *args, **kwargs)

    return wrapper


def _json_body(request):
    try:
        data = json.loads(request.body.decode("utf-8") or "{}")
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _get_film(film_id) -> Film:
    try:
        return Film.objects.get(pk=film_id)
    except Film.DoesNotExist:
        raise FilmNotFound(f"Film {film_id} not found")


def film_summary(film: Film) -> dict:
    return {
        "id": film.id,
        "name": film.name,
        "poster_image": film.poster_image,
        "preview_video_link": film.preview_video_link,
    }


def film_detail(film: Film, user=None) -> dict:
    scores = film.comments.aggregate(rating=Avg("rating"), count=Count("rating"))
    rating = scores["rating"]
    return {
        "id": film.id,
        "name": film.name,
        "poster_image": film.poster_image,
        "preview_image": film.preview_image,
        "background_image": film.background_image,
        "background_color": film.background_color,
        "video_link": film.video_link,
        "preview_video_link": film.preview_video_link,
        "description": film.description,
        "rating": round(rating, 1) if rating is not None else None,
        "scores_count": scores["count"],
        "director": film.director,
        "starring": [a.name for a in film.actors.all()],
        "run_time": film.run_time,
        "genre": [g.title for g in film.genres.all()],
        "released": film.released.isoformat() if film.released else None,
        "imdb_id": film.imdb_id,
        "status": film.status,
        "is_favorite": is_favorite(film, user),
    }


# -----------------------
# Films
# -----------------------
@csrf_exempt
@require_http_methods(["GET", "POST"])
def films_api(request):
    """
    GET  /api/films/?genre=&status=&order_by=released|rating&order_to=asc|desc
    POST /api/films/  body: {"imdb_id": "tt0111161"}  (moderators)
    """
    if request.method == "POST":
        return film_import_api(request)
    return film_list_api(request)


@catalog_errors
def film_list_api(request):
    films = films_for_request(request.GET, request.user)
    return JsonResponse([film_summary(f) for f in films], safe=False)


@moderator_required
@catalog_errors
def film_import_api(request):
    data = _json_body(request)
    if data is None:
        return JsonResponse({"error": "Invalid JSON body"}, status=400)

    imdb_id = data.get("imdb_id")
    if not imdb_id:
        return JsonResponse({"error": "imdb_id is required"}, status=400)

    try:
        film = get_film_service().import_by_imdb_id(imdb_id)
    except OmdbProviderError as e:
        logger.warning("OMDb lookup failed for %s: %s", imdb_id, e)
        return JsonResponse({"error": str(e)}, status=400)

    return JsonResponse(film_detail(film, request.user), status=201)


@csrf_exempt
@require_http_methods(["GET", "PATCH"])
@catalog_errors
def film_api(request, film_id):
    """
    GET   /api/films/<id>/
    PATCH /api/films/<id>/  (moderators)
    """
    film = _get_film(film_id)
    if request.method == "PATCH":
        return film_update_api(request, film)
    return JsonResponse(film_detail(film, request.user))


@moderator_required
def film_update_api(request, film):
    patch = _json_body(request)
    if patch is None:
        return JsonResponse({"error": "Invalid JSON body"}, status=400)

    try:
        film = get_film_service().update_film(film, patch)
    except ValidationError as e:
        return JsonResponse({"error": " ".join(e.messages)}, status=400)

    return JsonResponse(film_detail(film, request.user))


@require_GET
@catalog_errors
def film_similar_api(request, film_id):
    return JsonResponse(similar_films(film_id), safe=False)


# -----------------------
# Promo
# -----------------------
@require_GET
def promo_api(request):
    film = get_promo()
    if film is None:
        return JsonResponse({"error": "No promo film"}, status=404)
    return JsonResponse(film_detail(film, request.user))


@csrf_exempt
@require_POST
@moderator_required
@catalog_errors
def promo_create_api(request, film_id):
    film = promote(film_id)
    return JsonResponse(film_detail(film, request.user), status=201)


# -----------------------
# Genres
# -----------------------
@require_GET
def genres_api(request):
    genres = [{"id": g.id, "title": g.title} for g in Genre.objects.all()]
    return JsonResponse(genres, safe=False)


# -----------------------
# Favorites
# -----------------------
@require_GET
@login_required_json
def favorites_api(request):
    films = favorite_films(request.user)
    return JsonResponse([film_summary(f) for f in films], safe=False)


@csrf_exempt
@require_http_methods(["POST", "DELETE"])
@login_required_json
@catalog_errors
def film_favorite_api(request, film_id):
    film = _get_film(film_id)
    if request.method == "DELETE":
        remove_favorite(film, request.user)
        return HttpResponse(status=204)

    add_favorite(film, request.user)
    return JsonResponse({}, status=201)
