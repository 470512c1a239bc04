from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Checked in order when MONGO_URL is not set.
FALLBACK_URL_ENVS = ("MONGODB_CONNECTION_STRING_ONLINE", "MONGODB_URI")


class MongoSettings(BaseSettings):
    """
    MongoDB settings.

    Env support:
      - MONGO_URL, MONGO_DB, MONGO_SERVER_SELECTION_TIMEOUT_MS, MONGO_APP_NAME
      - MONGODB_CONNECTION_STRING_ONLINE / MONGODB_URI are accepted as fallbacks
        for the connection string.
    """

    url: Optional[str] = Field(default=None)
    db: Optional[str] = Field(default=None)
    server_selection_timeout_ms: int = Field(default=5000)
    app_name: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="MONGO_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def resolved_url(self) -> str:
        url = self.url
        if not url:
            for name in FALLBACK_URL_ENVS:
                url = os.getenv(name)
                if url:
                    break
        if not url:
            raise ValueError(
                "MONGO_URL (or MONGODB_CONNECTION_STRING_ONLINE) must be set for database connectivity"
            )
        return url

    @property
    def resolved_db_name(self) -> str:
        if self.db:
            return self.db
        try:
            path = urlparse(self.resolved_url).path.lstrip("/")
        except ValueError:
            path = ""
        return path.split("/")[0] or "app"


@lru_cache
def get_mongo_settings(**kwargs) -> MongoSettings:
    # Only include kwargs that are not None, so defaults in MongoSettings are used
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return MongoSettings(**filtered)
