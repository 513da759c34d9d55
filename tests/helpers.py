"""Shared builders for catalog tests."""

import datetime

from catalog.models import Actor, Comment, Film, Genre, User


def make_film(name="Film", genres=(), actors=(), **fields) -> Film:
    fields.setdefault("status", Film.Status.READY)
    film = Film.objects.create(name=name, **fields)
    for title in genres:
        film.genres.add(Genre.objects.get_or_create(title=title)[0])
    for actor in actors:
        film.actors.add(Actor.objects.get_or_create(name=actor)[0])
    return film


def rate(film, *ratings):
    for rating in ratings:
        Comment.objects.create(film=film, text="Comment", rating=rating)


def make_user(username="user", is_moderator=False) -> User:
    return User.objects.create_user(username=username, password="secret", is_moderator=is_moderator)


def film_record(**overrides) -> dict:
    record = {
        "name": "The Shawshank Redemption",
        "poster_image": "https://m.media-amazon.com/images/shawshank.jpg",
        "description": "Two imprisoned men bond over a number of years.",
        "director": "Frank Darabont",
        "run_time": 142,
        "released": datetime.date(1994, 10, 14),
        "imdb_id": "tt0111161",
        "actors": ["Tim Robbins", "Morgan Freeman", "Bob Gunton"],
        "genres": ["Drama"],
    }
    record.update(overrides)
    return record
