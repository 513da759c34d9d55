from .models import Actor, Genre

# Natural key each resolvable model is looked up by
NAME_FIELDS = {
    Actor: "name",
    Genre: "title",
}


def resolve_names(names, model) -> list:
    """
    Maps free-text names to ids of `model` rows, creating missing rows.

    Output keeps the order and length of `names`: a repeated name yields its
    id again. Two requests creating the same new name race on the unique
    constraint; get_or_create inserts inside a savepoint and re-reads the
    winner's row on IntegrityError.
    """
    if not names:
        return []

    field = NAME_FIELDS[model]
    ids = []
    for name in names:
        obj, _ = model.objects.get_or_create(**{field: name})
        ids.append(obj.pk)
    return ids


def resolve_actor_ids(names) -> list:
    return resolve_names(names, Actor)


def resolve_genre_ids(names) -> list:
    return resolve_names(names, Genre)
