"""MongoDB policy store and session."""
from typing import Any, Iterator, Mapping, Sequence
import time
import structlog
import pymongo
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from .base import Document, PolicyStore
from ..config import Settings, get_settings
from ..errors import ConnectionSetupError, StorageOperationError
from ..rules.models import SCHEMA_KEYS

log = structlog.get_logger()


def _failed(operation: str, error: PyMongoError | str, **context: Any) -> StorageOperationError:
    log.error(f"mongo.{operation}_failed", error=str(error), **context)
    return StorageOperationError(operation, str(error))


def create_indexes(collection: Collection, keys: Sequence[str]) -> list[str]:
    """Create an ascending single-field index on each key."""
    return [collection.create_index([(key, ASCENDING)]) for key in keys]


class MongoPolicyStore(PolicyStore):
    """Policy store backed by a MongoDB collection.

    Deadlines are applied with ``pymongo.timeout`` so they cover server
    selection, retries and the operation itself.
    """

    def __init__(
        self,
        collection: Collection,
        staging_suffix: str = "_staging",
        index_keys: Sequence[str] = SCHEMA_KEYS,
    ):
        """
        Initialize the store.

        Args:
            collection: Collection holding the policy documents
            staging_suffix: Suffix of the collection used by replace_all
            index_keys: Fields indexed on every collection this store
                recreates (drop, replace_all); empty disables indexing
        """
        self._collection = collection
        self._staging_name = f"{collection.name}{staging_suffix}"
        self._index_keys = tuple(index_keys)

    @property
    def collection(self) -> Collection:
        return self._collection

    def find(self, selector: Mapping[str, str], timeout: float | None = None) -> Iterator[Document]:
        """
        Stream matching documents.

        The deadline covers the whole read. It is entered around each cursor
        fetch only, so it is never active in the caller between documents.
        """
        selector = dict(selector)
        deadline = None if timeout is None else time.monotonic() + timeout
        try:
            cursor = self._collection.find(selector)
        except PyMongoError as e:
            raise _failed("find", e, selector=selector) from e
        try:
            documents = iter(cursor)
            while True:
                remaining = None
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise _failed("find", "deadline exceeded", selector=selector)
                try:
                    with pymongo.timeout(remaining):
                        document = next(documents)
                except StopIteration:
                    return
                except PyMongoError as e:
                    raise _failed("find", e, selector=selector) from e
                yield document
        finally:
            cursor.close()

    def insert_one(self, document: Document, timeout: float | None = None) -> None:
        try:
            with pymongo.timeout(timeout):
                result = self._collection.insert_one(document)
        except PyMongoError as e:
            raise _failed("insert_one", e) from e
        log.debug("mongo.inserted", inserted_id=str(result.inserted_id))

    def insert_many(self, documents: Sequence[Document], timeout: float | None = None) -> int:
        if not documents:
            return 0
        try:
            with pymongo.timeout(timeout):
                result = self._collection.insert_many(list(documents))
        except PyMongoError as e:
            raise _failed("insert_many", e, count=len(documents)) from e
        return len(result.inserted_ids)

    def delete_one(self, selector: Mapping[str, str], timeout: float | None = None) -> int:
        try:
            with pymongo.timeout(timeout):
                result = self._collection.delete_one(dict(selector))
        except PyMongoError as e:
            raise _failed("delete_one", e, selector=dict(selector)) from e
        return result.deleted_count

    def delete_many(self, selector: Mapping[str, str], timeout: float | None = None) -> int:
        try:
            with pymongo.timeout(timeout):
                result = self._collection.delete_many(dict(selector))
        except PyMongoError as e:
            raise _failed("delete_many", e, selector=dict(selector)) from e
        return result.deleted_count

    def drop(self, timeout: float | None = None) -> None:
        try:
            with pymongo.timeout(timeout):
                self._collection.drop()
                # Dropping a collection drops its indexes too
                create_indexes(self._collection, self._index_keys)
        except PyMongoError as e:
            raise _failed("drop", e) from e

    def replace_all(self, documents: Sequence[Document], timeout: float | None = None) -> int:
        """Write documents to the staging collection, then rename it over the live one."""
        if not documents:
            self.drop(timeout=timeout)
            return 0

        staging = self._collection.database.get_collection(self._staging_name)
        try:
            with pymongo.timeout(timeout):
                staging.drop()
                result = staging.insert_many(list(documents))
                create_indexes(staging, self._index_keys)
                staging.rename(self._collection.name, dropTarget=True)
        except PyMongoError as e:
            raise _failed("replace_all", e, staging=self._staging_name) from e
        log.info("mongo.staged_swap", staging=self._staging_name, target=self._collection.name)
        return len(result.inserted_ids)

    def ping(self, timeout: float | None = None) -> bool:
        try:
            with pymongo.timeout(timeout):
                self._collection.database.client.admin.command("ping")
            return True
        except PyMongoError as e:
            log.warning("mongo.ping_failed", error=str(e))
            return False


class MongoSession:
    """
    Owns the MongoDB client used by one adapter instance.

    The session is opened explicitly (or by entering it as a context
    manager) and closed when the adapter is done with it.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._client: MongoClient | None = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    @property
    def collection(self) -> Collection:
        if self._client is None:
            raise ConnectionSetupError("session is not open")
        return self._client[self.settings.MONGO_DATABASE][self.settings.MONGO_COLLECTION]

    def uri(self) -> str:
        """Connection URI; a server list takes precedence over MONGO_URI."""
        servers = self.settings.server_list()
        if servers:
            return f"mongodb://{','.join(servers)}/"
        return self.settings.MONGO_URI

    def client_options(self) -> dict[str, Any]:
        s = self.settings
        timeout_ms = int(s.MONGO_CONNECT_TIMEOUT_S * 1000)
        options: dict[str, Any] = {
            "serverSelectionTimeoutMS": timeout_ms,
            "connectTimeoutMS": timeout_ms,
        }
        if s.MONGO_REPLICA_SET:
            options["replicaSet"] = s.MONGO_REPLICA_SET
        if s.MONGO_TLS_CA_FILE:
            options["tls"] = True
            options["tlsCAFile"] = s.MONGO_TLS_CA_FILE
        if s.MONGO_TLS_CERT_KEY_FILE:
            # Client certificate authentication
            options["tls"] = True
            options["tlsCertificateKeyFile"] = s.MONGO_TLS_CERT_KEY_FILE
            options["authMechanism"] = "MONGODB-X509"
            options["authSource"] = "$external"
        return options

    def open(self) -> "MongoSession":
        """
        Connect, ping the primary and create the rule indexes.

        Raises:
            ConnectionSetupError: If any setup step fails
        """
        if self._client is not None:
            return self

        try:
            client = MongoClient(self.uri(), **self.client_options())
        except PyMongoError as e:
            log.error("mongo.connect_failed", error=str(e))
            raise ConnectionSetupError(f"cannot create MongoDB client: {e}") from e

        try:
            client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            log.error("mongo.ping_failed", error=str(e))
            raise ConnectionSetupError(f"cannot reach MongoDB: {e}") from e

        self._client = client
        log.info(
            "mongo.connected",
            database=self.settings.MONGO_DATABASE,
            collection=self.settings.MONGO_COLLECTION,
        )

        if self.settings.MONGO_CREATE_INDEXES:
            try:
                self.ensure_indexes()
            except PyMongoError as e:
                self.close()
                log.error("mongo.index_failed", error=str(e))
                raise ConnectionSetupError(f"cannot create indexes: {e}") from e
        return self

    def ensure_indexes(self) -> list[str]:
        """Create an ascending index on every schema field."""
        names = create_indexes(self.collection, SCHEMA_KEYS)
        log.info("mongo.indexes_ensured", indexes=names)
        return names

    def close(self):
        """Close the MongoDB client."""
        if self._client:
            self._client.close()
            self._client = None
            log.info("mongo.disconnected")

    def __enter__(self) -> "MongoSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
