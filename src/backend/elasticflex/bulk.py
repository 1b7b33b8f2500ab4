"""Bulk indexing of collections of loaded model instances."""

from elasticflex.enums import BulkAction
from elasticflex.indexer import get_indexer


def bulk_index(instances):
    """
    Index every instance of the collection in a single bulk request.

    Returns False for an empty collection without calling Elasticsearch,
    otherwise the raw bulk response, where per-item failures are reported.
    """
    instances = list(instances)
    if not instances:
        return False
    return get_indexer().bulk(instances, BulkAction.INDEX)


def bulk_remove_index(instances):
    """Delete the documents of every instance in a single bulk request."""
    instances = list(instances)
    if not instances:
        return False
    return get_indexer().bulk(instances, BulkAction.DELETE)


def bulk_reindex(instances):
    """
    Delete then index the documents of every instance.

    The two requests are not atomic: documents are missing from the index
    between them.
    """
    instances = list(instances)
    bulk_remove_index(instances)
    return bulk_index(instances)
