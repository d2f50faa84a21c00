from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LOG_JSON: bool = True
    # Store backend selection: "mongo" or "memory"
    STORE_BACKEND: Literal["mongo", "memory"] = "mongo"
    # Used when MONGO_SERVERS is empty
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_SERVERS: str = ""  # Comma-separated host:port list, enables X.509 auth
    MONGO_DATABASE: str = "casbin"
    MONGO_COLLECTION: str = "casbin_rules"
    MONGO_REPLICA_SET: str | None = None
    MONGO_TLS_CA_FILE: str | None = None
    MONGO_TLS_CERT_KEY_FILE: str | None = None
    MONGO_CONNECT_TIMEOUT_S: float = 10.0
    MONGO_OPERATION_TIMEOUT_S: float | None = None  # None = no deadline
    MONGO_CREATE_INDEXES: bool = True
    # "replace" drops then bulk inserts, "staged" swaps in a staging collection
    SAVE_STRATEGY: Literal["replace", "staged"] = "replace"

    def server_list(self) -> list[str]:
        return [s.strip() for s in self.MONGO_SERVERS.split(",") if s.strip()]

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
