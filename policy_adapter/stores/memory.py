"""In-memory policy store."""
from typing import Iterator, Mapping, Sequence
import itertools
import structlog
from .base import Document, PolicyStore

log = structlog.get_logger()


def _matches(document: Document, selector: Mapping[str, str]) -> bool:
    return all(document.get(key) == value for key, value in selector.items())


class InMemoryPolicyStore(PolicyStore):
    """In-memory implementation of the policy store. Timeouts are ignored."""

    def __init__(self, documents: Sequence[Document] | None = None):
        self._ids = itertools.count(1)
        self._documents: list[Document] = []
        for document in documents or []:
            self._documents.append(self._stamp(document))

    def _stamp(self, document: Document) -> Document:
        stored = dict(document)
        stored.setdefault("_id", next(self._ids))
        return stored

    @property
    def documents(self) -> list[Document]:
        """Copies of the stored documents in insertion order."""
        return [dict(d) for d in self._documents]

    def find(self, selector: Mapping[str, str], timeout: float | None = None) -> Iterator[Document]:
        for document in list(self._documents):
            if _matches(document, selector):
                yield dict(document)

    def insert_one(self, document: Document, timeout: float | None = None) -> None:
        self._documents.append(self._stamp(document))

    def insert_many(self, documents: Sequence[Document], timeout: float | None = None) -> int:
        stamped = [self._stamp(d) for d in documents]
        self._documents.extend(stamped)
        return len(stamped)

    def delete_one(self, selector: Mapping[str, str], timeout: float | None = None) -> int:
        for i, document in enumerate(self._documents):
            if _matches(document, selector):
                del self._documents[i]
                return 1
        return 0

    def delete_many(self, selector: Mapping[str, str], timeout: float | None = None) -> int:
        kept = [d for d in self._documents if not _matches(d, selector)]
        deleted = len(self._documents) - len(kept)
        self._documents = kept
        return deleted

    def drop(self, timeout: float | None = None) -> None:
        log.debug("memory.dropped", count=len(self._documents))
        self._documents = []

    def replace_all(self, documents: Sequence[Document], timeout: float | None = None) -> int:
        self._documents = [self._stamp(d) for d in documents]
        return len(self._documents)

    def ping(self, timeout: float | None = None) -> bool:
        """In-memory store is always reachable."""
        return True
