"""Tests for the search shortcuts of indexable models."""

import pytest

from elasticflex.results import SearchResults
from elasticflex.tests.testapp.models import Article, Place


def _hit(pk, title, score=1.0):
    """Build a search hit of an article."""
    return {
        "_index": "blog-articles",
        "_id": str(pk),
        "_score": score,
        "_source": {"id": pk, "title": title, "author_id": 1},
    }


def test_search_sends_body_verbatim(mock_es_client):
    """Arbitrary bodies are sent unchanged to the model's index."""
    body = {"query": {"term": {"rating": 5}}, "aggs": {"x": {"terms": {"field": "y"}}}}

    results = Article.search(body)

    mock_es_client.search.assert_called_once_with(index="blog-articles", body=body)
    assert isinstance(results, SearchResults)
    assert len(results) == 0
    assert results.total == 0


def test_search_wraps_hits(mock_es_client):
    """Hits are wrapped into model instances, in order."""
    mock_es_client.search.return_value = {
        "took": 3,
        "hits": {
            "total": {"value": 12, "relation": "eq"},
            "max_score": 2.0,
            "hits": [_hit(1, "First", 2.0), _hit(2, "Second", 1.0)],
        },
    }

    results = Article.match("title", "first")

    assert results.total == 12
    assert results.max_score == 2.0
    assert results.took == 3
    assert [article.title for article in results] == ["First", "Second"]
    assert results[0].document_score == 2.0
    assert results[1].pk == 2
    assert all(article.is_document for article in results)
    assert results.response is mock_es_client.search.return_value


def test_search_legacy_total(mock_es_client):
    """A bare hit count is supported."""
    mock_es_client.search.return_value = {"hits": {"total": 4, "hits": []}}

    assert Article.search({}).total == 4


def test_count(mock_es_client):
    """Counting returns an integer."""
    mock_es_client.count.return_value = {"count": "7"}
    body = {"query": {"match": {"title": "django"}}}

    assert Article.count(body) == 7
    mock_es_client.count.assert_called_once_with(index="blog-articles", body=body)


def test_count_without_body(mock_es_client):
    """Counting without body counts every document."""
    mock_es_client.count.return_value = {"count": 3}

    assert Article.count() == 3
    mock_es_client.count.assert_called_once_with(index="blog-articles")


def test_match(mock_es_client):
    """The match shortcut uses the model's result size."""
    Article.match("title", "django")

    mock_es_client.search.assert_called_once_with(
        index="blog-articles",
        body={"query": {"match": {"title": "django"}}, "size": 1000},
    )


def test_multi_match(mock_es_client):
    """The multi_match shortcut searches several fields."""
    Article.multi_match(["title", "body"], "django")

    body = mock_es_client.search.call_args.kwargs["body"]
    assert body["query"] == {
        "multi_match": {"query": "django", "fields": ["title", "body"]}
    }


def test_fuzzy(mock_es_client):
    """The fuzzy shortcut sends the requested fuzziness."""
    Article.fuzzy("title", "djnago", fuzziness="1")

    body = mock_es_client.search.call_args.kwargs["body"]
    assert body["query"] == {"fuzzy": {"title": {"value": "djnago", "fuzziness": "1"}}}


def test_geoshape(mock_es_client):
    """The geoshape shortcut uses the model's own result size."""
    coordinates = [[13.0, 53.0], [14.0, 52.0]]

    Place.geoshape("area", coordinates)

    mock_es_client.search.assert_called_once_with(
        index="geo-testapp_place",
        body={
            "query": {
                "geo_shape": {
                    "area": {"shape": {"type": "envelope", "coordinates": coordinates}}
                }
            },
            "size": 50,
        },
    )


def test_ids(mock_es_client):
    """The ids shortcut fetches documents by id."""
    Article.ids([1, 2])

    body = mock_es_client.search.call_args.kwargs["body"]
    assert body["query"] == {"ids": {"values": ["1", "2"]}}


def test_more_like_this(mock_es_client):
    """The more_like_this shortcut looks documents up in the model's index."""
    Article.more_like_this(["title", "body"], [4], percent_terms_to_match=0.75)

    clause = mock_es_client.search.call_args.kwargs["body"]["query"]["more_like_this"]
    assert clause["like"] == [{"_id": "4", "_index": "blog-articles"}]
    assert clause["minimum_should_match"] == "75%"


def test_search_errors_propagate(mock_es_client):
    """Search errors are not swallowed."""
    mock_es_client.search.side_effect = ConnectionError("unreachable")

    with pytest.raises(ConnectionError):
        Article.match("title", "django")
