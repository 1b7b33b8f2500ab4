"""Keep Elasticsearch documents in sync with Django models."""
