from django.urls import path

from . import views

urlpatterns = [
    path("films/", views.films_api, name="films_api"),
    path("films/<int:film_id>/", views.film_api, name="film_api"),
    path("films/<int:film_id>/similar/", views.film_similar_api, name="film_similar_api"),
    path("films/<int:film_id>/favorite/", views.film_favorite_api, name="film_favorite_api"),
    path("favorite/", views.favorites_api, name="favorites_api"),
    path("promo/", views.promo_api, name="promo_api"),
    path("promo/<int:film_id>/", views.promo_create_api, name="promo_create_api"),
    path("genres/", views.genres_api, name="genres_api"),
]
