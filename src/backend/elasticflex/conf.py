"""Settings for the elasticflex application."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULT_HOSTS = ["http://localhost:9200"]
DEFAULT_RESULT_SIZE = 1000


@dataclass(frozen=True)
class FlexConfig:
    """
    Explicit configuration handed to the document indexer.

    Built from the `ELASTICFLEX` Django setting, a dict that may declare:
    - INDEX: the default index name, read from the SEARCH_INDEX environment
      variable when absent
    - AUTO_INDEX: whether save/delete keep documents in sync automatically
    - HOSTS: the Elasticsearch hosts
    - CLIENT_OPTIONS: extra keyword arguments for the Elasticsearch client
    - RESULT_SIZE: the default size cap of query shortcuts
    """

    index: Optional[str] = None
    auto_index: bool = False
    hosts: List[str] = field(default_factory=lambda: list(DEFAULT_HOSTS))
    client_options: Dict[str, Any] = field(default_factory=dict)
    result_size: int = DEFAULT_RESULT_SIZE


def get_config() -> FlexConfig:
    """Read the current configuration from Django settings."""
    user_settings = getattr(settings, "ELASTICFLEX", {})
    if not isinstance(user_settings, dict):
        raise ImproperlyConfigured("The ELASTICFLEX setting must be a dict.")

    hosts = user_settings.get("HOSTS", DEFAULT_HOSTS)
    if isinstance(hosts, str):
        hosts = [hosts]

    return FlexConfig(
        index=user_settings.get("INDEX", os.environ.get("SEARCH_INDEX")) or None,
        auto_index=bool(user_settings.get("AUTO_INDEX", False)),
        hosts=list(hosts),
        client_options=dict(user_settings.get("CLIENT_OPTIONS", {})),
        result_size=int(user_settings.get("RESULT_SIZE", DEFAULT_RESULT_SIZE)),
    )
