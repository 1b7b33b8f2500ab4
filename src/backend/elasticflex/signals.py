"""Signal handlers keeping documents in sync with indexable models."""
# pylint: disable=unused-argument

import logging

from django.core.signals import setting_changed
from django.db.models.signals import post_save, pre_delete
from django.dispatch import receiver

from elasticflex.conf import get_config
from elasticflex.indexer import reset_es_client
from elasticflex.models import Indexable

logger = logging.getLogger(__name__)


@receiver(post_save)
def sync_document_post_save(
    sender, instance, created, raw=False, update_fields=None, **kwargs
):
    """
    Index a new row, or update the document of an existing one.

    A save restricted with `update_fields` only sends and resyncs these fields,
    the other changes stay pending until they are saved.
    """
    if not isinstance(instance, Indexable):
        return

    saved = None if update_fields is None else instance.get_attnames(update_fields)
    try:
        if raw or not get_config().auto_index:
            return

        if created:
            # The primary key is only known once the row is inserted
            instance.index()
            return

        changed = None
        if saved is not None:
            changed = instance.get_dirty_fields(saved)
            if not changed:
                return

        if not instance.update_index(changed):
            logger.info(
                "Document of %s %s missing, indexing it again",
                sender.__name__,
                instance.pk,
            )
            instance.index()
    finally:
        instance.sync_snapshot(saved)


@receiver(pre_delete)
def remove_document_pre_delete(sender, instance, **kwargs):
    """Remove the document of a row before the row is deleted."""
    if not isinstance(instance, Indexable):
        return

    if get_config().auto_index:
        instance.remove_index()


@receiver(setting_changed)
def reset_client_on_setting_changed(sender, setting, **kwargs):
    """Rebuild the Elasticsearch client when its settings change."""
    if setting == "ELASTICFLEX":
        reset_es_client()
