"""
Elasticflex enums declaration
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class SyncStatus(models.TextChoices):
    """Outcome of a document write against the search engine."""

    OK = "ok", _("Ok")
    NOT_FOUND = "not_found", _("Not found")
    CONFLICT = "conflict", _("Version conflict")


class BulkAction(models.TextChoices):
    """Actions supported in a bulk request."""

    INDEX = "index", _("Index")
    DELETE = "delete", _("Delete")
