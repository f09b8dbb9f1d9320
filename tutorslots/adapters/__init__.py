"""
Adapters layer - External integrations (marketplace API, local files, keyring).
"""

from .api_client import ApiClient
from .file_store import FileStore
from .token_store import TokenStore

__all__ = ["ApiClient", "FileStore", "TokenStore"]
