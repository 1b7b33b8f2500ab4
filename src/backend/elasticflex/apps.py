"""Elasticflex application"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class ElasticflexConfig(AppConfig):
    """Configuration class for the elasticflex app."""

    name = "elasticflex"
    verbose_name = _("elasticsearch document sync")

    def ready(self):
        """Connect the signal handlers keeping documents in sync."""
        # pylint: disable=import-outside-toplevel, unused-import
        from elasticflex import signals  # noqa: F401
