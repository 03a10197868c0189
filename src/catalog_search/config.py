from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    VECTOR_STORE_BACKEND: str = "qdrant"  # qdrant | redis | memory
    VECTOR_DB_URL: str = "http://localhost:6333"  # Qdrant URL, ":memory:" for local mode
    REDIS_URL: str = "redis://localhost:6379"
    INDEX_NAME: str = "menu-index"
    KEY_PREFIX: str = "item:"
    EMBEDDING_MODEL_ID: str = "sentence-transformers/all-MiniLM-L6-v2"
    EMBEDDING_CACHE_DIR: str | None = None
    EMBEDDING_DIM: int = 384
    SEARCH_ALGORITHM: str = "flat"  # flat (exact) | hnsw
    VECTOR_ENCODING: str = "array"  # array | bytes
    STORAGE_LAYOUT: str = "json"  # json | hash (redis only)
    DEFAULT_TOP_K: int = 3
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
