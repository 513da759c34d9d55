from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from unfold.admin import ModelAdmin, TabularInline

from .errors import CatalogError
from .models import Actor, Comment, Film, FilmActor, FilmGenre, Genre, User
from .services import promote


@admin.register(User)
class UserAdmin(BaseUserAdmin, ModelAdmin):
    list_display = ("username", "email", "is_moderator", "is_staff")
    list_filter = ("is_moderator", "is_staff", "is_active")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Catalog", {"fields": ("is_moderator",)}),
    )


@admin.register(Genre)
class GenreAdmin(ModelAdmin):
    search_fields = ("title",)
    ordering = ("title",)


@admin.register(Actor)
class ActorAdmin(ModelAdmin):
    search_fields = ("name",)
    ordering = ("name",)


class FilmActorInline(TabularInline):
    model = FilmActor
    extra = 1
    autocomplete_fields = ("actor",)


class FilmGenreInline(TabularInline):
    model = FilmGenre
    extra = 1
    autocomplete_fields = ("genre",)


@admin.register(Film)
class FilmAdmin(ModelAdmin):
    list_display = ("name", "status", "promo", "released", "run_time", "director")
    list_filter = ("status", "promo", "genres")
    search_fields = ("name", "imdb_id")
    inlines = (FilmGenreInline, FilmActorInline)
    ordering = ("name",)
    readonly_fields = ("promo",)
    actions = ("make_promo",)

    @admin.action(description="Make the promo film")
    def make_promo(self, request, queryset):
        if queryset.count() != 1:
            messages.error(request, "Select exactly one film to promote.")
            return
        try:
            film = promote(queryset.get().pk)
        except CatalogError as e:
            messages.error(request, e.message)
            return
        messages.success(request, f"« {film} » is now the promo film.")


@admin.register(Comment)
class CommentAdmin(ModelAdmin):
    list_display = ("film", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("film__name", "user__username", "text")
    autocomplete_fields = ("film",)
    date_hierarchy = "created_at"
