import json
from unittest import mock

import requests
from django.test import TestCase, override_settings
from django.urls import reverse

from catalog.models import Film

from .helpers import film_record, make_film, make_user, rate


class FilmListViewTests(TestCase):
    def setUp(self):
        self.ready = make_film("Ready", genres=["Drama"])
        self.pending = make_film("Pending", genres=["Drama"], status=Film.Status.PENDING)

    def test_lists_ready_films(self):
        response = self.client.get(reverse("films_api"), {"status": "pending"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([f["id"] for f in response.json()], [self.ready.pk])

    def test_moderator_lists_pending_films(self):
        self.client.force_login(make_user("moderator", is_moderator=True))

        response = self.client.get(reverse("films_api"), {"status": "pending"})

        self.assertEqual([f["id"] for f in response.json()], [self.pending.pk])

    def test_unknown_genre(self):
        response = self.client.get(reverse("films_api"), {"genre": "Western"})

        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())

    def test_bad_sort_key(self):
        response = self.client.get(reverse("films_api"), {"order_by": "director"})

        self.assertEqual(response.status_code, 400)


class FilmImportViewTests(TestCase):
    def post(self, body):
        return self.client.post(reverse("films_api"), data=json.dumps(body), content_type="application/json")

    def test_requires_moderator(self):
        self.assertEqual(self.post({"imdb_id": "tt0111161"}).status_code, 401)

        self.client.force_login(make_user())
        self.assertEqual(self.post({"imdb_id": "tt0111161"}).status_code, 403)

    @mock.patch("catalog.views.OmdbMovieSource.find_by_id")
    def test_imports_film(self, find_by_id):
        find_by_id.return_value = film_record()
        self.client.force_login(make_user("moderator", is_moderator=True))

        response = self.post({"imdb_id": "tt0111161"})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["status"], "pending")
        self.assertTrue(Film.objects.filter(imdb_id="tt0111161").exists())

    @mock.patch("catalog.views.OmdbMovieSource.find_by_id", return_value=None)
    def test_unknown_imdb_id(self, find_by_id):
        self.client.force_login(make_user("moderator", is_moderator=True))

        self.assertEqual(self.post({"imdb_id": "tt0000000"}).status_code, 404)

    @override_settings(OMDB_API_KEY="test-key")
    @mock.patch("catalog.providers.omdb.requests.get")
    def test_provider_failure_is_a_json_error(self, get):
        get.return_value = mock.Mock(status_code=200, text="<!doctype html>")
        get.return_value.json.side_effect = requests.exceptions.JSONDecodeError(
            "Expecting value", "<!doctype html>", 0
        )
        self.client.force_login(make_user("moderator", is_moderator=True))

        response = self.post({"imdb_id": "tt0111161"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("invalid JSON", response.json()["error"])
        self.assertFalse(Film.objects.exists())

    def test_missing_imdb_id(self):
        self.client.force_login(make_user("moderator", is_moderator=True))

        self.assertEqual(self.post({}).status_code, 400)


class FilmDetailViewTests(TestCase):
    def setUp(self):
        self.film = make_film("Film", genres=["Drama"], actors=["Morgan Freeman"])

    def test_detail(self):
        rate(self.film, 8, 9)

        data = self.client.get(reverse("film_api", args=[self.film.pk])).json()

        self.assertEqual(data["name"], "Film")
        self.assertEqual(data["genre"], ["Drama"])
        self.assertEqual(data["starring"], ["Morgan Freeman"])
        self.assertEqual(data["rating"], 8.5)
        self.assertEqual(data["scores_count"], 2)
        self.assertFalse(data["is_favorite"])

    def test_missing_film(self):
        response = self.client.get(reverse("film_api", args=[self.film.pk + 100]))

        self.assertEqual(response.status_code, 404)

    def test_update(self):
        self.client.force_login(make_user("moderator", is_moderator=True))

        response = self.client.patch(
            reverse("film_api", args=[self.film.pk]),
            data=json.dumps({"name": "Renamed", "genre": ["Horror"], "starring": []}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["genre"], ["Horror"])
        self.assertEqual(response.json()["starring"], [])
        self.film.refresh_from_db()
        self.assertEqual(self.film.name, "Renamed")

    def test_update_rejects_bad_value(self):
        self.client.force_login(make_user("moderator", is_moderator=True))

        response = self.client.patch(
            reverse("film_api", args=[self.film.pk]),
            data=json.dumps({"status": "archived"}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 400)

    def test_update_rejects_bad_names(self):
        self.client.force_login(make_user("moderator", is_moderator=True))

        response = self.client.patch(
            reverse("film_api", args=[self.film.pk]),
            data=json.dumps({"starring": "Tim Robbins", "genre": ["Drama"]}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(list(self.film.actors.values_list("name", flat=True)), ["Morgan Freeman"])

    def test_update_requires_moderator(self):
        self.client.force_login(make_user())

        response = self.client.patch(
            reverse("film_api", args=[self.film.pk]),
            data=json.dumps({"name": "Renamed"}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 403)

    def test_similar(self):
        other = make_film("Other", genres=["Drama"])

        response = self.client.get(reverse("film_similar_api", args=[self.film.pk]))

        self.assertEqual([f["id"] for f in response.json()], [other.pk])


class PromoViewTests(TestCase):
    def test_promote_and_read(self):
        film = make_film()
        self.client.force_login(make_user("moderator", is_moderator=True))

        self.assertEqual(self.client.get(reverse("promo_api")).status_code, 404)

        response = self.client.post(reverse("promo_create_api", args=[film.pk]))
        self.assertEqual(response.status_code, 201)

        self.assertEqual(self.client.get(reverse("promo_api")).json()["id"], film.pk)

    def test_promote_missing_film(self):
        self.client.force_login(make_user("moderator", is_moderator=True))

        response = self.client.post(reverse("promo_create_api", args=[42]))

        self.assertEqual(response.status_code, 404)


class FavoriteViewTests(TestCase):
    def setUp(self):
        self.film = make_film()
        self.user = make_user()

    def test_requires_login(self):
        self.assertEqual(self.client.get(reverse("favorites_api")).status_code, 401)

    def test_add_list_remove(self):
        self.client.force_login(self.user)
        url = reverse("film_favorite_api", args=[self.film.pk])

        self.assertEqual(self.client.post(url).status_code, 201)
        self.assertEqual(
            [f["id"] for f in self.client.get(reverse("favorites_api")).json()], [self.film.pk]
        )
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertEqual(self.client.delete(url).status_code, 422)


class GenreViewTests(TestCase):
    def test_lists_genres(self):
        make_film(genres=["Drama", "Comedy"])

        titles = [g["title"] for g in self.client.get(reverse("genres_api")).json()]

        self.assertEqual(titles, ["Comedy", "Drama"])
