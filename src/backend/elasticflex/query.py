"""Builders for the query bodies behind the search shortcuts."""

from typing import Any, Dict, List, Optional, Sequence

from elasticflex.conf import DEFAULT_RESULT_SIZE


def _with_size(query: Dict[str, Any], size: Optional[int]) -> Dict[str, Any]:
    """Wrap a query clause into a body capped at `size` hits."""
    return {
        "query": query,
        "size": DEFAULT_RESULT_SIZE if size is None else size,
    }


def match_query(field: str, value: Any, size: Optional[int] = None):
    """Build a match query on a single field."""
    return _with_size({"match": {field: value}}, size)


def multi_match_query(fields: List[str], value: Any, size: Optional[int] = None):
    """Build a multi_match query over several fields."""
    return _with_size(
        {"multi_match": {"query": value, "fields": list(fields)}},
        size,
    )


def fuzzy_query(
    field: str, value: Any, fuzziness: str = "AUTO", size: Optional[int] = None
):
    """Build a fuzzy query on a single field."""
    return _with_size(
        {"fuzzy": {field: {"value": value, "fuzziness": fuzziness}}},
        size,
    )


def geoshape_query(
    field: str,
    coordinates: List,
    shape_type: str = "envelope",
    size: Optional[int] = None,
):
    """Build a geo_shape query matching a shape given by its coordinates."""
    return _with_size(
        {
            "geo_shape": {
                field: {
                    "shape": {"type": shape_type, "coordinates": coordinates},
                }
            }
        },
        size,
    )


def ids_query(values: Sequence, size: Optional[int] = None):
    """Build an ids query."""
    return _with_size({"ids": {"values": [str(value) for value in values]}}, size)


def more_like_this_query(
    fields: List[str],
    ids: Sequence,
    min_term_freq: int = 1,
    percent_terms_to_match: float = 0.5,
    min_word_length: int = 3,
    index: Optional[str] = None,
    size: Optional[int] = None,
):
    """
    Build a more_like_this query for documents similar to the ones in `ids`.

    `percent_terms_to_match` is a ratio between 0 and 1, sent as the percentage
    `minimum_should_match` expected by Elasticsearch.
    """
    like = []
    for doc_id in ids:
        document = {"_id": str(doc_id)}
        if index:
            document["_index"] = index
        like.append(document)

    return _with_size(
        {
            "more_like_this": {
                "fields": list(fields),
                "like": like,
                "min_term_freq": min_term_freq,
                "minimum_should_match": f"{round(percent_terms_to_match * 100)}%",
                "min_word_length": min_word_length,
            }
        },
        size,
    )
