"""Helpers shared by the elasticflex management commands."""

from django.apps import apps
from django.core.management.base import CommandError

from elasticflex.models import Indexable


def get_indexable_model(label):
    """Resolve an `app_label.ModelName` label into an indexable model class."""
    try:
        model = apps.get_model(label)
    except (LookupError, ValueError) as e:
        raise CommandError(f"Unknown model: {label}") from e

    if not issubclass(model, Indexable):
        raise CommandError(f"Model {label} is not indexable")
    return model
