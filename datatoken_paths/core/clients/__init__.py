from datatoken_paths.core.clients.HttpClient import HttpClient
from datatoken_paths.core.clients.MetadataCacheClient import MetadataCacheClient

__all__ = [
    "HttpClient",
    "MetadataCacheClient",
]
