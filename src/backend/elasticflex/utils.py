"""Utility functions for elasticflex."""


def response_body(response):
    """Unwrap a client response into the plain dict it carries."""
    return getattr(response, "body", response)
