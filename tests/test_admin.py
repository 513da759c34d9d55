from django.test import TestCase
from django.urls import reverse

from catalog.models import Film, User

from .helpers import make_film


class FilmAdminTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser("admin", "admin@example.com", "secret")
        self.client.force_login(self.admin)

    def run_action(self, *films):
        return self.client.post(
            reverse("admin:catalog_film_changelist"),
            {"action": "make_promo", "_selected_action": [f.pk for f in films]},
        )

    def test_make_promo_action(self):
        current = make_film("Current")
        target = make_film("Target")
        Film.objects.filter(pk=current.pk).update(promo=True)

        response = self.run_action(target)

        self.assertEqual(response.status_code, 302)
        self.assertEqual(list(Film.objects.filter(promo=True)), [target])

    def test_make_promo_needs_one_film(self):
        films = [make_film("One"), make_film("Two")]

        self.run_action(*films)

        self.assertFalse(Film.objects.filter(promo=True).exists())
