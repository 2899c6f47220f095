"""
Persistence layer: abstract store contracts, the SQLAlchemy implementations
used by the API, and in-memory doubles for tests.
"""

from learntrack.stores.base import CredentialStore, ProgressStore
from learntrack.stores.credential_store import SqlCredentialStore
from learntrack.stores.memory import InMemoryCredentialStore, InMemoryProgressStore
from learntrack.stores.progress_store import SqlProgressStore

__all__ = [
    "CredentialStore",
    "ProgressStore",
    "SqlCredentialStore",
    "SqlProgressStore",
    "InMemoryCredentialStore",
    "InMemoryProgressStore",
]
