"""
Declare the indexable model mixin and its queryset
"""

import copy
from typing import Any, Dict, Iterable, List, Optional, Set

from django.db import models

from elasticflex import bulk, query
from elasticflex.enums import SyncStatus
from elasticflex.indexer import SyncResult, get_indexer, serialize_value
from elasticflex.results import SearchResults


class IndexableQuerySet(models.QuerySet):
    """Queryset able to index or unindex all its rows in one bulk request."""

    def index(self):
        """Index every row of the queryset."""
        return bulk.bulk_index(self)

    def remove_index(self):
        """Delete the documents of every row of the queryset."""
        return bulk.bulk_remove_index(self)

    def reindex(self):
        """Delete then index the documents of every row of the queryset."""
        return bulk.bulk_reindex(self)


class IndexableManager(models.Manager.from_queryset(IndexableQuerySet)):
    """Manager exposing the bulk indexing methods of IndexableQuerySet."""


class Indexable(models.Model):
    """
    Abstract model keeping an Elasticsearch document in sync with each row.

    Subclasses may declare:
    - index_name: overrides the configured index name
    - type_name: overrides the type name, the database table by default
    - mapping_properties: the properties of the type mapping
    - result_size: the size cap of query shortcuts, from settings by default

    Instances built from search hits carry the document score, version and
    highlighted fragments.
    """

    index_name: Optional[str] = None
    type_name: Optional[str] = None
    mapping_properties: Optional[Dict[str, Any]] = None
    result_size: Optional[int] = None

    document_score = None
    document_version = None
    is_document = False

    objects = IndexableManager()

    class Meta:
        abstract = True

    @classmethod
    def from_db(cls, db, field_names, values):
        """Remember loaded values to detect changed fields later on."""
        instance = super().from_db(db, field_names, values)
        instance.sync_snapshot()
        return instance

    def refresh_from_db(self, using=None, fields=None, **kwargs):
        """Resync the reloaded fields, deferred ones included."""
        super().refresh_from_db(using=using, fields=fields, **kwargs)
        self.sync_snapshot(None if fields is None else self.get_attnames(fields))

    # Names

    @classmethod
    def get_indexer(cls):
        """Return the indexer performing requests for this model."""
        return get_indexer()

    @classmethod
    def get_index_name(cls) -> Optional[str]:
        """Return the index name, from the model or else from settings."""
        return cls.get_indexer().index_name_for(cls)

    @classmethod
    def get_type_name(cls) -> str:
        """Return the type name, from the model or else its database table."""
        return cls.get_indexer().type_name_for(cls)

    @classmethod
    def get_mapping_properties(cls) -> Dict[str, Any]:
        """Return the properties of the type mapping."""
        return cls.mapping_properties or {}

    @classmethod
    def get_result_size(cls) -> int:
        """Return the maximum number of hits fetched by query shortcuts."""
        if cls.result_size is not None:
            return cls.result_size
        return cls.get_indexer().config.result_size

    @classmethod
    def set_result_size(cls, result_size: int):
        """Set the maximum number of hits fetched by query shortcuts."""
        cls.result_size = result_size

    # Changed fields

    def _current_values(self) -> Dict[str, Any]:
        """Values of the loaded concrete fields, keyed by attribute name."""
        return {
            field.attname: self.__dict__[field.attname]
            for field in self._meta.concrete_fields
            if field.attname in self.__dict__
        }

    def get_attnames(self, field_names) -> Set[str]:
        """Map field names, as given to save or refresh_from_db, to attnames."""
        attnames = {}
        for field in self._meta.concrete_fields:
            attnames[field.name] = attnames[field.attname] = field.attname
        # Relation names refreshed from the prefetch cache are no fields
        return {attnames[name] for name in field_names if name in attnames}

    def sync_snapshot(self, fields: Optional[Iterable[str]] = None):
        """
        Consider the current field values as the persisted ones.

        When `fields` is given, only these attnames are resynced and the other
        fields keep their pending changes.
        """
        current = self._current_values()
        if fields is None:
            self._loaded_values = copy.deepcopy(current)
            return

        loaded = getattr(self, "_loaded_values", None) or {}
        for name in fields:
            if name in current:
                loaded[name] = copy.deepcopy(current[name])
        self._loaded_values = loaded

    def get_dirty_fields(
        self, fields: Optional[Iterable[str]] = None
    ) -> Dict[str, Any]:
        """
        Return the fields changed since the instance was loaded or saved.

        `fields` restricts the result to the given attnames.
        """
        loaded = getattr(self, "_loaded_values", None)
        current = self._current_values()
        if fields is not None:
            fields = set(fields)
            current = {name: current[name] for name in current if name in fields}
        if loaded is None:
            return current
        return {
            name: value
            for name, value in current.items()
            if name not in loaded or loaded[name] != value
        }

    def is_dirty(self) -> bool:
        """Whether any field changed since the instance was loaded or saved."""
        return bool(self.get_dirty_fields())

    # Documents

    def document_fields(self) -> Dict[str, Any]:
        """Return the document sent to Elasticsearch for this instance."""
        return {
            field.attname: serialize_value(getattr(self, field.attname))
            for field in self._meta.concrete_fields
        }

    def index(self) -> SyncResult:
        """Create or replace the document of this instance."""
        return self.get_indexer().index(self)

    def update_index(self, fields: Optional[Dict[str, Any]] = None) -> SyncResult:
        """
        Update the document with `fields`, or else with the changed fields.

        Nothing is sent when there is nothing to update. A missing document
        gives a falsy result instead of an error.
        """
        if fields:
            body = dict(fields)
        elif self.is_dirty():
            body = self.get_dirty_fields()
        else:
            return SyncResult(SyncStatus.OK)

        return self.get_indexer().update(self, body)

    def remove_index(self) -> SyncResult:
        """Delete the document of this instance."""
        return self.get_indexer().remove(self)

    def reindex(self) -> SyncResult:
        """Delete then index the document, which is missing in between."""
        self.remove_index()
        return self.index()

    def index_with_version(
        self, version: int, version_type: str = "external"
    ) -> SyncResult:
        """Index the document at `version`, a conflict gives a falsy result."""
        return self.get_indexer().index_with_version(self, version, version_type)

    # Search hits

    @classmethod
    def new_from_hit(cls, hit: Dict[str, Any]):
        """Build an instance from a search hit and its metadata."""
        # pylint: disable=protected-access
        source = hit.get("_source") or {}
        attnames = {field.attname for field in cls._meta.concrete_fields}
        values = {name: value for name, value in source.items() if name in attnames}

        pk_attname = cls._meta.pk.attname
        if pk_attname not in values and hit.get("_id") is not None:
            values[pk_attname] = cls._meta.pk.to_python(hit["_id"])

        instance = cls(**values)
        instance._state.adding = False
        instance.is_document = True
        instance.document_score = hit.get("_score")
        instance.document_version = hit.get("_version")
        instance._highlighted = {
            field: fragments[0]
            for field, fragments in (hit.get("highlight") or {}).items()
            if fragments
        }
        instance.sync_snapshot()
        return instance

    def highlight(self, field: str):
        """Return the first highlighted fragment of a field, or False."""
        return getattr(self, "_highlighted", {}).get(field, False)

    # Queries

    @classmethod
    def search(cls, body: Dict[str, Any]) -> SearchResults:
        """Run an arbitrary search request on this model's documents."""
        return cls.get_indexer().search(cls, body)

    @classmethod
    def count(cls, body: Optional[Dict[str, Any]] = None) -> int:
        """Count this model's documents matching `body`."""
        return cls.get_indexer().count(cls, body)

    @classmethod
    def match(cls, field: str, value: Any) -> SearchResults:
        """Search documents whose `field` matches `value`."""
        return cls.search(query.match_query(field, value, cls.get_result_size()))

    @classmethod
    def multi_match(cls, fields: List[str], value: Any) -> SearchResults:
        """Search documents where any of `fields` matches `value`."""
        return cls.search(
            query.multi_match_query(fields, value, cls.get_result_size())
        )

    @classmethod
    def fuzzy(cls, field: str, value: Any, fuzziness: str = "AUTO") -> SearchResults:
        """Search documents whose `field` approximately matches `value`."""
        return cls.search(
            query.fuzzy_query(field, value, fuzziness, cls.get_result_size())
        )

    @classmethod
    def geoshape(
        cls, field: str, coordinates: List, shape_type: str = "envelope"
    ) -> SearchResults:
        """Search documents whose geo shape `field` intersects the given shape."""
        return cls.search(
            query.geoshape_query(field, coordinates, shape_type, cls.get_result_size())
        )

    @classmethod
    def ids(cls, values: List) -> SearchResults:
        """Fetch documents by id."""
        return cls.search(query.ids_query(values, cls.get_result_size()))

    @classmethod
    def more_like_this(
        cls,
        fields: List[str],
        ids: List,
        min_term_freq: int = 1,
        percent_terms_to_match: float = 0.5,
        min_word_length: int = 3,
    ) -> SearchResults:
        """Search documents similar to the documents with the given ids."""
        return cls.search(
            query.more_like_this_query(
                fields,
                ids,
                min_term_freq=min_term_freq,
                percent_terms_to_match=percent_terms_to_match,
                min_word_length=min_word_length,
                index=cls.get_indexer().address(cls).physical_index,
                size=cls.get_result_size(),
            )
        )

    # Mappings

    @classmethod
    def get_mapping(cls) -> Dict[str, Any]:
        """Return the raw mapping of this model's type."""
        return cls.get_indexer().get_mapping(cls)

    @classmethod
    def put_mapping(cls):
        """Define the mapping of this model's type from mapping_properties."""
        return cls.get_indexer().put_mapping(cls, cls.get_mapping_properties())

    @classmethod
    def delete_mapping(cls) -> SyncResult:
        """Drop the mapping of this model's type along with its documents."""
        return cls.get_indexer().delete_mapping(cls)

    @classmethod
    def has_mapping(cls) -> bool:
        """Whether a mapping is defined for this model's type."""
        return cls.get_indexer().has_mapping(cls)

    @classmethod
    def rebuild_mapping(cls):
        """Drop the existing mapping if any, then define it again."""
        if cls.has_mapping():
            cls.delete_mapping()
        return cls.put_mapping()
