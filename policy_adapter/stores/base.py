"""Base interface for policy storage backends."""
from abc import ABC, abstractmethod
from typing import Any, Iterator, Mapping, Sequence

Document = dict[str, Any]


class PolicyStore(ABC):
    """Abstract interface for the collection holding policy documents.

    Every call accepts a ``timeout`` in seconds; None means no deadline.
    Failures surface as StorageOperationError and are never retried.
    """

    @abstractmethod
    def find(self, selector: Mapping[str, str], timeout: float | None = None) -> Iterator[Document]:
        """
        Stream documents matching an equality selector.

        Args:
            selector: Field -> required value; empty matches everything
            timeout: Deadline for the whole read in seconds

        Returns:
            Iterator over matching documents in storage order
        """
        pass

    @abstractmethod
    def insert_one(self, document: Document, timeout: float | None = None) -> None:
        """Insert a single document."""
        pass

    @abstractmethod
    def insert_many(self, documents: Sequence[Document], timeout: float | None = None) -> int:
        """
        Insert documents in one bulk call.

        Returns:
            Number of inserted documents
        """
        pass

    @abstractmethod
    def delete_one(self, selector: Mapping[str, str], timeout: float | None = None) -> int:
        """Delete at most one matching document and return the deleted count."""
        pass

    @abstractmethod
    def delete_many(self, selector: Mapping[str, str], timeout: float | None = None) -> int:
        """Delete every matching document and return the deleted count."""
        pass

    @abstractmethod
    def drop(self, timeout: float | None = None) -> None:
        """Remove every stored document."""
        pass

    @abstractmethod
    def replace_all(self, documents: Sequence[Document], timeout: float | None = None) -> int:
        """
        Replace the stored rule set in a single visible step.

        The new documents are written aside first; readers see either the
        old or the new rule set, never an empty one.

        Returns:
            Number of documents now stored
        """
        pass

    @abstractmethod
    def ping(self, timeout: float | None = None) -> bool:
        """
        Check if the backend is reachable.

        Returns:
            True if backend is healthy, False otherwise
        """
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass
