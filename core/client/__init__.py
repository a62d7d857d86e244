"""Endpoint-specific API clients.

Each client declares the method, path, query and body of its calls and leaves
their execution to ``handlers.async_comm.AsyncHttp``.
"""

from core.client.account_client import AccountClient
from core.client.base import ClientBase
from core.client.export_client import ExportClient
from core.client.import_client import ForceMode, ImportClient

__all__: list[str] = ["AccountClient", "ClientBase", "ExportClient", "ForceMode", "ImportClient"]
