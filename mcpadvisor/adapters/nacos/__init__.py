"""
Nacos Adapter - MCP server registry client.
"""

from .client import NacosClient
from .models import NacosMcpServer, endpoint_url

__all__ = ["NacosClient", "NacosMcpServer", "endpoint_url"]
