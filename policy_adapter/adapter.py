"""Policy adapter: loads, saves and edits policy rules in a document store."""
from typing import Any, Literal, Mapping, Sequence
import structlog
from .config import Settings, get_settings
from .errors import FilteredPolicySaveError, StorageOperationError
from .metrics import AdapterMetrics
from .model import append_rule, iter_rules
from .rules.codec import decode, encode
from .rules.models import SCHEMA_KEYS, PolicyFilter
from .rules.selectors import build_selector, field_range_constraints, filter_selector
from .stores.base import PolicyStore
from .stores.memory import InMemoryPolicyStore
from .stores.mongo import MongoPolicyStore, MongoSession

log = structlog.get_logger()

SaveStrategy = Literal["replace", "staged"]


class FilterState:
    """Whether the most recent load was restricted by a filter."""

    def __init__(self):
        self.filtered = False

    def mark(self, filtered: bool):
        self.filtered = filtered


class PolicyAdapter:
    """
    Persists an enforcement engine's policy model in a policy store.

    One adapter owns one store (and, when built from settings, the MongoDB
    session behind it). Calls are synchronous and not synchronized: callers
    must serialize load/save pairs on a shared instance.
    """

    def __init__(
        self,
        store: PolicyStore,
        session: MongoSession | None = None,
        metrics: AdapterMetrics | None = None,
        save_strategy: SaveStrategy = "replace",
        timeout: float | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            store: Backend holding the policy documents
            session: Session to close together with the adapter
            metrics: Metrics sink (a private registry is used if omitted)
            save_strategy: "replace" drops then bulk inserts, "staged"
                swaps in a fully written staging copy
            timeout: Default deadline in seconds for every storage call
        """
        self._store = store
        self._session = session
        self._state = FilterState()
        self.metrics = metrics or AdapterMetrics()
        self.save_strategy = save_strategy
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings | None = None, metrics: AdapterMetrics | None = None) -> "PolicyAdapter":
        """
        Build an adapter for the configured store backend.

        The MongoDB session is opened here and closed by close().
        """
        settings = settings or get_settings()
        options = {
            "metrics": metrics,
            "save_strategy": settings.SAVE_STRATEGY,
            "timeout": settings.MONGO_OPERATION_TIMEOUT_S,
        }
        if settings.STORE_BACKEND == "memory":
            log.info("store.selected", type="memory")
            return cls(InMemoryPolicyStore(), **options)

        session = MongoSession(settings).open()
        log.info("store.selected", type="mongo", collection=settings.MONGO_COLLECTION)
        index_keys = SCHEMA_KEYS if settings.MONGO_CREATE_INDEXES else ()
        store = MongoPolicyStore(session.collection, index_keys=index_keys)
        return cls(store, session=session, **options)

    @property
    def store(self) -> PolicyStore:
        return self._store

    def _deadline(self, timeout: float | None) -> float | None:
        return self.timeout if timeout is None else timeout

    # Loading

    def load_policy(self, model: Any, timeout: float | None = None) -> None:
        """Load every stored rule into the model."""
        self.load_filtered_policy(model, None, timeout=timeout)

    def load_filtered_policy(
        self,
        model: Any,
        filter: PolicyFilter | Mapping[str, Any] | None,
        timeout: float | None = None,
    ) -> None:
        """
        Load the rules matching an equality filter into the model.

        Rules are appended in storage order without deduplication. A
        non-empty filter marks the adapter as filtered, which blocks
        save_policy until the next unfiltered load.

        Args:
            model: Policy model to append to
            filter: PolicyFilter or mapping over ptype/v0..v5; None or
                empty loads everything
            timeout: Deadline for the whole read

        Raises:
            InvalidFilterError: If the filter is not a schema equality selector
            StorageOperationError: If the read fails
            DecodeError: If a stored document is malformed
        """
        selector = filter_selector(filter)
        filtered = bool(selector)
        self._state.mark(filtered)
        self.metrics.set_filtered(filtered)

        count = 0
        with self.metrics.track("load"):
            for raw in self._store.find(selector, timeout=self._deadline(timeout)):
                rule = decode(raw)
                append_rule(model, rule.section, rule.ptype, rule.fields)
                self.metrics.record_loaded(rule.ptype)
                count += 1

        log.info("policy.loaded", count=count, filtered=filtered, selector=selector)

    def is_filtered(self) -> bool:
        """Return True if the last load was filtered."""
        return self._state.filtered

    # Saving

    def save_policy(self, model: Any, timeout: float | None = None) -> int:
        """
        Replace the stored rule set with every p and g rule of the model.

        With the "replace" strategy the collection is dropped before the
        bulk insert: if the insert fails, storage is left empty or partially
        written. The "staged" strategy does not have that window.

        Returns:
            Number of stored rules

        Raises:
            FilteredPolicySaveError: If the last load was filtered
            StorageOperationError: If a storage call fails
        """
        if self._state.filtered:
            log.warning("policy.save_rejected", reason="filtered policy loaded")
            raise FilteredPolicySaveError("cannot save a filtered policy")

        documents = [encode(ptype, fields).model_dump() for ptype, fields in iter_rules(model)]
        deadline = self._deadline(timeout)

        with self.metrics.track("save"):
            if self.save_strategy == "staged":
                count = self._store.replace_all(documents, timeout=deadline)
            else:
                self._store.drop(timeout=deadline)
                try:
                    count = self._store.insert_many(documents, timeout=deadline)
                except StorageOperationError:
                    log.error(
                        "policy.save_incomplete",
                        expected=len(documents),
                        message="stored rules were dropped before the insert failed",
                    )
                    raise

        self.metrics.record_written("save", count)
        log.info("policy.saved", count=count, strategy=self.save_strategy)
        return count

    # Incremental updates

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str], timeout: float | None = None) -> None:
        """Store one rule. Duplicates are not checked."""
        document = encode(ptype, rule).model_dump()
        with self.metrics.track("add"):
            self._store.insert_one(document, timeout=self._deadline(timeout))
        self.metrics.record_written("add", 1)
        log.info("policy.added", sec=sec, ptype=ptype, rule=list(rule))

    def add_policies(
        self, sec: str, ptype: str, rules: Sequence[Sequence[str]], timeout: float | None = None
    ) -> int:
        """Store several rules of one type in a single bulk insert."""
        documents = [encode(ptype, rule).model_dump() for rule in rules]
        with self.metrics.track("add_many"):
            count = self._store.insert_many(documents, timeout=self._deadline(timeout))
        self.metrics.record_written("add_many", count)
        log.info("policy.added_many", sec=sec, ptype=ptype, count=count)
        return count

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str], timeout: float | None = None) -> bool:
        """
        Delete one stored copy of a rule.

        Returns:
            True if a document was deleted, False if none matched
        """
        selector = encode(ptype, rule).model_dump()
        with self.metrics.track("remove"):
            deleted = self._store.delete_one(selector, timeout=self._deadline(timeout))
        self.metrics.record_removed("remove", deleted)
        log.info("policy.removed", sec=sec, ptype=ptype, rule=list(rule), deleted=deleted)
        return deleted > 0

    def remove_policies(
        self, sec: str, ptype: str, rules: Sequence[Sequence[str]], timeout: float | None = None
    ) -> int:
        """Delete one stored copy of each rule and return how many were deleted."""
        return sum(self.remove_policy(sec, ptype, rule, timeout=timeout) for rule in rules)

    def remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str, timeout: float | None = None
    ) -> int:
        """
        Delete every rule whose fields starting at field_index equal field_values.

        Empty values and positions outside v0..v5 leave the field
        unconstrained, so remove_filtered_policy(sec, "p", 0) removes every
        rule of type "p".

        Returns:
            Number of deleted rules
        """
        selector = build_selector(ptype, field_range_constraints(field_index, field_values))
        with self.metrics.track("remove_filtered"):
            deleted = self._store.delete_many(selector, timeout=self._deadline(timeout))
        self.metrics.record_removed("remove_filtered", deleted)
        log.info("policy.removed_filtered", sec=sec, selector=selector, deleted=deleted)
        return deleted

    # Lifecycle

    def ping(self, timeout: float | None = None) -> bool:
        """Check that the store is reachable."""
        return self._store.ping(timeout=self._deadline(timeout))

    def close(self):
        """Release the store and the owned session."""
        self._store.close()
        if self._session is not None:
            self._session.close()

    def __enter__(self) -> "PolicyAdapter":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
