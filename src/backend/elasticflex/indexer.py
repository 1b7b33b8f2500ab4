"""Elasticsearch client and document indexing functionality."""
# pylint: disable=unexpected-keyword-arg

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ConflictError, NotFoundError

from elasticflex.conf import FlexConfig, get_config
from elasticflex.enums import BulkAction, SyncStatus
from elasticflex.results import SearchResults
from elasticflex.utils import response_body

logger = logging.getLogger(__name__)


# Elasticsearch client instantiation
def get_es_client():
    """Get Elasticsearch client instance."""
    if not hasattr(get_es_client, "cached_client"):
        config = get_config()
        get_es_client.cached_client = Elasticsearch(
            hosts=config.hosts, **config.client_options
        )
    return get_es_client.cached_client


def reset_es_client():
    """Drop the cached client so the next call rebuilds it from settings."""
    if hasattr(get_es_client, "cached_client"):
        del get_es_client.cached_client


def serialize_value(value):
    """Render dates and times as ISO 8601 strings, leave anything else as is."""
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class Address:
    """
    Location of a document: index name, type name and document id.

    Mapping types no longer exist in Elasticsearch, so each type lives in its own
    physical index named after the index and the type.
    """

    index: Optional[str]
    type_name: str
    id: Optional[str] = None

    @property
    def physical_index(self) -> str:
        """Name of the Elasticsearch index holding documents of this type."""
        if not self.index:
            return self.type_name.lower()
        return f"{self.index}-{self.type_name}".lower()

    def params(self, with_id: bool = True) -> Dict[str, Any]:
        """Keyword arguments addressing the document in client calls."""
        params = {"index": self.physical_index}
        if with_id and self.id is not None:
            params["id"] = self.id
        return params


@dataclass(frozen=True)
class SyncResult:
    """Result of a document write. Only successful writes are truthy."""

    status: SyncStatus
    response: Any = None

    def __bool__(self):
        return self.status == SyncStatus.OK


class DocumentIndexer:
    """
    Perform document and mapping requests for indexable model instances.

    The configuration is given at construction time, the client defaults to the
    shared cached one.
    """

    def __init__(self, config: FlexConfig, client: Optional[Elasticsearch] = None):
        self.config = config
        self._client = client

    @property
    def client(self):
        """Elasticsearch client used for every request."""
        if self._client is None:
            self._client = get_es_client()
        return self._client

    def index_name_for(self, model) -> Optional[str]:
        """Index name declared on the model, or the configured one."""
        return getattr(model, "index_name", None) or self.config.index

    def type_name_for(self, model) -> str:
        """Type name declared on the model, or its database table."""
        # pylint: disable=protected-access
        return getattr(model, "type_name", None) or model._meta.db_table

    def address(self, model, pk=None) -> Address:
        """Build the address of a document of `model` with primary key `pk`."""
        return Address(
            index=self.index_name_for(model),
            type_name=self.type_name_for(model),
            id=None if pk is None else str(pk),
        )

    def address_of(self, instance) -> Address:
        """Build the address of an instance's document."""
        return self.address(type(instance), instance.pk)

    # Documents

    def index(self, instance) -> SyncResult:
        """Create or replace the document of an instance."""
        address = self.address_of(instance)
        # pylint: disable=no-value-for-parameter
        response = self.client.index(
            **address.params(), document=instance.document_fields()
        )
        logger.debug("Indexed document %s in %s", address.id, address.physical_index)
        return SyncResult(SyncStatus.OK, response)

    def update(self, instance, fields: Dict[str, Any]) -> SyncResult:
        """Partially update the document of an instance with `fields`."""
        address = self.address_of(instance)
        doc = {name: serialize_value(value) for name, value in fields.items()}
        try:
            response = self.client.update(**address.params(), doc=doc)
        except NotFoundError:
            logger.warning(
                "Document %s not found in %s, update skipped",
                address.id,
                address.physical_index,
            )
            return SyncResult(SyncStatus.NOT_FOUND)
        logger.debug(
            "Updated fields %s of document %s in %s",
            ", ".join(doc),
            address.id,
            address.physical_index,
        )
        return SyncResult(SyncStatus.OK, response)

    def remove(self, instance) -> SyncResult:
        """Delete the document of an instance."""
        address = self.address_of(instance)
        try:
            response = self.client.delete(**address.params())
        except NotFoundError:
            logger.warning(
                "Document %s not found in %s, nothing to delete",
                address.id,
                address.physical_index,
            )
            return SyncResult(SyncStatus.NOT_FOUND)
        logger.debug("Deleted document %s from %s", address.id, address.physical_index)
        return SyncResult(SyncStatus.OK, response)

    def index_with_version(
        self, instance, version: int, version_type: str = "external"
    ) -> SyncResult:
        """Index the document of an instance only if `version` is accepted."""
        address = self.address_of(instance)
        try:
            # pylint: disable=no-value-for-parameter
            response = self.client.index(
                **address.params(),
                document=instance.document_fields(),
                version=version,
                version_type=version_type,
            )
        except NotFoundError:
            logger.warning(
                "Document %s not found in %s", address.id, address.physical_index
            )
            return SyncResult(SyncStatus.NOT_FOUND)
        except ConflictError:
            logger.warning(
                "Version conflict on document %s in %s at version %s",
                address.id,
                address.physical_index,
                version,
            )
            return SyncResult(SyncStatus.CONFLICT)
        logger.debug(
            "Indexed document %s in %s at version %s",
            address.id,
            address.physical_index,
            version,
        )
        return SyncResult(SyncStatus.OK, response)

    # Queries

    def search(self, model, body: Dict[str, Any]) -> SearchResults:
        """Run a search request and wrap the hits into instances of `model`."""
        address = self.address(model)
        response = self.client.search(**address.params(with_id=False), body=body)
        return SearchResults(response, model)

    def count(self, model, body: Optional[Dict[str, Any]] = None) -> int:
        """Count the documents of `model` matching `body`."""
        params = self.address(model).params(with_id=False)
        if body:
            params["body"] = body
        response = self.client.count(**params)
        return int(response["count"])

    # Mappings

    def get_mapping(self, model) -> Dict[str, Any]:
        """Return the raw mapping of the model's index, empty when it is missing."""
        address = self.address(model)
        try:
            response = self.client.indices.get_mapping(
                **address.params(with_id=False)
            )
        except NotFoundError:
            return {}
        return response_body(response)

    def has_mapping(self, model) -> bool:
        """Whether the model's index exists and declares properties."""
        mapping = self.get_mapping(model)
        return any(
            (entry or {}).get("mappings", {}).get("properties")
            for entry in mapping.values()
        )

    def put_mapping(self, model, properties: Dict[str, Any]):
        """Define the mapping, creating the model's index when needed."""
        address = self.address(model)
        mapping = {"_source": {"enabled": True}, "properties": properties}
        if not self.client.indices.exists(index=address.physical_index):
            response = self.client.indices.create(
                index=address.physical_index, mappings=mapping
            )
            logger.info(
                "Created Elasticsearch index %s with mapping", address.physical_index
            )
        else:
            response = self.client.indices.put_mapping(
                index=address.physical_index, body=mapping
            )
            logger.info("Updated mapping of index %s", address.physical_index)
        return response

    def delete_mapping(self, model) -> SyncResult:
        """Drop the model's index along with its mapping and documents."""
        address = self.address(model)
        try:
            response = self.client.indices.delete(index=address.physical_index)
        except NotFoundError:
            logger.warning(
                "Index %s not found, nothing to delete", address.physical_index
            )
            return SyncResult(SyncStatus.NOT_FOUND)
        logger.info("Deleted Elasticsearch index %s", address.physical_index)
        return SyncResult(SyncStatus.OK, response)

    # Bulk

    def bulk_operations(self, instances: Iterable, action: BulkAction) -> List[Dict]:
        """Build the ordered entries of a bulk request."""
        operations = []
        for instance in instances:
            address = self.address_of(instance)
            operations.append(
                {
                    action.value: {
                        "_index": address.physical_index,
                        "_id": address.id,
                    }
                }
            )
            if action == BulkAction.INDEX:
                operations.append(instance.document_fields())
        return operations

    def bulk(self, instances: List, action: BulkAction):
        """Send one bulk request with an `action` entry per instance."""
        response = self.client.bulk(
            operations=self.bulk_operations(instances, action)
        )
        if response_body(response).get("errors"):
            logger.warning(
                "Bulk %s of %d documents reported item errors",
                action.value,
                len(instances),
            )
        else:
            logger.debug("Bulk %s of %d documents", action.value, len(instances))
        return response


def get_indexer() -> DocumentIndexer:
    """Build an indexer from the current settings, using the shared client."""
    return DocumentIndexer(get_config())
