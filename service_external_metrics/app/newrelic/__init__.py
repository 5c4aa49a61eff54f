"""
New Relic API access: fetch capability, payload models and the RPM client.
"""

from .client import NewRelicClient, parse_rpm
from .transport import FetchClient, HttpxFetchClient

__all__ = ["NewRelicClient", "parse_rpm", "FetchClient", "HttpxFetchClient"]
