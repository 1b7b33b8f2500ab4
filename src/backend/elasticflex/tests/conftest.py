"""Fixtures for tests in the elasticflex application"""
# pylint: disable=redefined-outer-name

from unittest import mock

import pytest
from elasticsearch.exceptions import BadRequestError, ConflictError, NotFoundError

from elasticflex.tests import factories


def api_error(error_class, status):
    """Build an Elasticsearch API error as the client raises it."""
    return error_class(
        message=f"{status} error", meta=mock.Mock(status=status), body={}
    )


@pytest.fixture
def not_found_error():
    """A "document not found" error."""
    return api_error(NotFoundError, 404)


@pytest.fixture
def conflict_error():
    """A "version conflict" error."""
    return api_error(ConflictError, 409)


@pytest.fixture
def bad_request_error():
    """A "bad request" error."""
    return api_error(BadRequestError, 400)


@pytest.fixture
def mock_es_client():
    """Mock the Elasticsearch client."""
    with mock.patch("elasticflex.indexer.get_es_client") as mock_get_es_client:
        mock_es = mock.MagicMock()
        # Setup standard mock returns
        mock_es.index.return_value = {"result": "created", "_version": 1}
        mock_es.update.return_value = {"result": "updated", "_version": 2}
        mock_es.delete.return_value = {"result": "deleted"}
        mock_es.bulk.return_value = {"errors": False, "items": []}
        mock_es.count.return_value = {"count": 0}
        mock_es.search.return_value = {"hits": {"total": {"value": 0}, "hits": []}}
        mock_es.indices.exists.return_value = False
        mock_es.indices.get_mapping.return_value = {}
        mock_es.indices.create.return_value = {"acknowledged": True}
        mock_es.indices.delete.return_value = {"acknowledged": True}
        mock_es.indices.put_mapping.return_value = {"acknowledged": True}

        mock_get_es_client.return_value = mock_es
        yield mock_es


@pytest.fixture
def article():
    """Create an article."""
    return factories.ArticleFactory()
