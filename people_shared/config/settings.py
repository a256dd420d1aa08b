"""
Centralized configuration using Pydantic Settings
Loads from environment variables and .env file
"""

import os
from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class DataBackend(str, Enum):
    """Record store variants"""

    POSTGRES = "postgres"
    REDIS = "redis"


class Settings(BaseSettings):
    """
    Application settings
    All settings can be overridden by environment variables
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow"
    )

    # =============================================
    # SERVICE
    # =============================================
    service_name: str = Field(default="person_enricher", description="Service name used in logs")
    host: str = Field(default="0.0.0.0", description="HTTP bind host")
    port: int = Field(default=8080, description="HTTP port for health/status")

    # =============================================
    # RECORD STORE
    # =============================================
    data_backend: DataBackend = Field(default=DataBackend.REDIS, description="Record store backend")
    store_timeout_seconds: float = Field(default=10.0, description="Timeout for a single store call")

    # =============================================
    # REDIS
    # =============================================
    redis_host: str = Field(default="redis", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_password: Optional[str] = Field(default=None, description="Redis password")

    # =============================================
    # POSTGRESQL
    # =============================================
    db_host: str = Field(default="postgres", description="Database host")
    db_port: int = Field(default=5432, description="Database port")
    db_name: str = Field(default="trashtalk", description="Database name")
    db_user: str = Field(default="people_user", description="Database user")
    db_password: str = Field(default="changeme123", description="Database password")
    db_pool_min: int = Field(default=1, description="Minimum pool size")
    db_pool_max: int = Field(default=5, description="Maximum pool size")

    @property
    def database_url(self) -> str:
        """Get PostgreSQL connection URL for asyncpg"""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # =============================================
    # WORK QUEUE (REDIS STREAM)
    # =============================================
    stream_person_work: str = Field(default="people:work", description="Stream of person work messages")
    stream_maxlen: int = Field(default=10_000, description="Approximate max length of the work stream")
    consumer_group: str = Field(default="person_enricher", description="Consumer group name")
    consumer_name: str = Field(
        default_factory=lambda: f"person_enricher_{os.getpid()}",
        description="Consumer name inside the group"
    )
    stream_block_ms: int = Field(default=5000, description="Block time for XREADGROUP in milliseconds")

    # =============================================
    # PEOPLE LOOKUP API
    # =============================================
    lookup_api_url: str = Field(
        default="http://people-directory:8090/v1/people/search",
        description="People search endpoint"
    )
    lookup_api_key: Optional[str] = Field(default=None, description="People search API key")
    lookup_timeout_seconds: float = Field(default=10.0, description="Timeout per lookup attempt")
    lookup_max_attempts: int = Field(default=3, ge=1, description="Total lookup attempts for transient errors")
    lookup_backoff_max_seconds: float = Field(default=30.0, description="Upper bound for backoff between attempts")

    # =============================================
    # LOGGING
    # =============================================
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format (json or text)")

    # =============================================
    # HELPER METHODS
    # =============================================

    def get_redis_url(self) -> str:
        """Get Redis connection URL"""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


# Global settings instance
settings = Settings()
