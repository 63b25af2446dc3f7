# Infrastructure Card Store Adapters Package
from .local_store import LocalCardStore
from .remote_store import RemoteCardStore

__all__ = ["LocalCardStore", "RemoteCardStore"]
