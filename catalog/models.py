from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q


# -----------------------
# User
# -----------------------
class User(AbstractUser):
    is_moderator = models.BooleanField(default=False)

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"


# -----------------------
# Genre
# -----------------------
class Genre(models.Model):
    title = models.CharField(max_length=80, unique=True)

    class Meta:
        ordering = ["title"]
        verbose_name = "Genre"
        verbose_name_plural = "Genres"

    def __str__(self) -> str:
        return self.title


# -----------------------
# Actor
# -----------------------
class Actor(models.Model):
    name = models.CharField(max_length=120, unique=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Actor"
        verbose_name_plural = "Actors"

    def __str__(self) -> str:
        return self.name


# -----------------------
# Film
# -----------------------
class Film(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        MODERATE = "moderate", "On moderation"
        READY = "ready", "Ready"

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    director = models.CharField(max_length=200, blank=True, null=True)

    run_time = models.PositiveSmallIntegerField(null=True, blank=True)
    released = models.DateField(null=True, blank=True)

    poster_image = models.URLField(max_length=500, null=True, blank=True)
    preview_image = models.URLField(max_length=500, null=True, blank=True)
    background_image = models.URLField(max_length=500, null=True, blank=True)
    background_color = models.CharField(max_length=9, null=True, blank=True)

    video_link = models.URLField(max_length=500, null=True, blank=True)
    preview_video_link = models.URLField(max_length=500, null=True, blank=True)

    status = models.CharField(
        max_length=8,
        choices=Status.choices,
        default=Status.PENDING,
    )

    # Managed by services.promote(), see the single_promo_film constraint
    promo = models.BooleanField(default=False, editable=False)

    imdb_id = models.CharField(
        max_length=16,
        unique=True,
        null=True,
        blank=True,
        help_text="Film id in the external movie database (OMDb / IMDb)",
    )

    genres = models.ManyToManyField(
        Genre,
        through="FilmGenre",
        blank=True,
        related_name="films",
    )

    actors = models.ManyToManyField(
        Actor,
        through="FilmActor",
        blank=True,
        related_name="films",
    )

    favorited_by = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="favorite_films",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-released", "id"]
        verbose_name = "Film"
        verbose_name_plural = "Films"
        constraints = [
            models.UniqueConstraint(
                fields=["promo"],
                condition=Q(promo=True),
                name="single_promo_film",
            )
        ]

    def __str__(self) -> str:
        return self.name


# ---------------------------------------
# Through tables for Film ↔ Genre / Actor
# ---------------------------------------
class FilmGenre(models.Model):
    film = models.ForeignKey(Film, on_delete=models.CASCADE)
    genre = models.ForeignKey(Genre, on_delete=models.CASCADE)

    class Meta:
        db_table = "film_genre"
        constraints = [
            models.UniqueConstraint(
                fields=["film", "genre"],
                name="unique_genre_per_film",
            )
        ]

    def __str__(self) -> str:
        return f"{self.genre} — {self.film}"


class FilmActor(models.Model):
    film = models.ForeignKey(Film, on_delete=models.CASCADE)
    actor = models.ForeignKey(Actor, on_delete=models.CASCADE)

    class Meta:
        db_table = "film_actor"
        constraints = [
            models.UniqueConstraint(
                fields=["film", "actor"],
                name="unique_actor_per_film",
            )
        ]

    def __str__(self) -> str:
        return f"{self.actor} — {self.film}"


# -----------------------
# Comment
# -----------------------
class Comment(models.Model):
    film = models.ForeignKey(
        Film,
        on_delete=models.CASCADE,
        related_name="comments",
    )
    # Comments imported from external sources have no author
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="comments",
    )

    text = models.TextField()
    rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(10)],
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Comment"
        verbose_name_plural = "Comments"

    def __str__(self) -> str:
        return f"{self.user or 'anonymous'} — {self.film}"
