"""
MongoDB persistence adapter for policy-based access control rules.

Provides:
- Full and filtered policy loads into an engine-owned model
- Full saves guarded against overwriting storage with a filtered policy
- Single, batch and field-range filtered rule updates
"""

from .adapter import FilterState, PolicyAdapter
from .errors import (
    AdapterError,
    ConnectionSetupError,
    DecodeError,
    EncodeError,
    FilteredPolicySaveError,
    InvalidFilterError,
    StorageOperationError,
)
from .rules.models import PolicyFilter, PolicyRule, StoredDocument
from .stores import InMemoryPolicyStore, MongoPolicyStore, MongoSession, PolicyStore

__all__ = [
    "FilterState",
    "PolicyAdapter",
    "AdapterError",
    "ConnectionSetupError",
    "DecodeError",
    "EncodeError",
    "FilteredPolicySaveError",
    "InvalidFilterError",
    "StorageOperationError",
    "PolicyFilter",
    "PolicyRule",
    "StoredDocument",
    "InMemoryPolicyStore",
    "MongoPolicyStore",
    "MongoSession",
    "PolicyStore",
]
