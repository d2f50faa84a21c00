"""Storage backends for policy documents."""
from .base import Document, PolicyStore
from .memory import InMemoryPolicyStore
from .mongo import MongoPolicyStore, MongoSession

__all__ = [
    "Document",
    "PolicyStore",
    "InMemoryPolicyStore",
    "MongoPolicyStore",
    "MongoSession",
]
