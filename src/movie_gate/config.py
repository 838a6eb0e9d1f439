#    Copyright 2025 FAO
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.
#
#    Author: Carlo Cancellieri (ccancellieri@gmail.com)
#    Company: FAO, Viale delle Terme di Caracalla, 00100 Rome, Italy
#    Contact: copyright@fao.org - http://fao.org/contact-us/terms/en/

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from movie_gate.shared.jwt_utils import cognito_jwks_url


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MOVIE_GATE_",
        env_file=".env",
        extra="ignore",
    )

    # General
    ENVIRONMENT: Environment = Environment.DEVELOPMENT
    LOGGING_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Storage
    DATABASE_URL: str = "mysql+aiomysql://root@localhost:3306/movies"
    REDIS_URL: str = "redis://127.0.0.1:6379/0"
    CACHE_TTL: int = Field(3600, description="Seconds a cached movie or search page stays valid.")

    # Identity provider
    AWS_REGION: Optional[str] = None
    COGNITO_USER_POOL_ID: Optional[str] = None
    JWKS_URL: Optional[str] = Field(None, description="Overrides the URL derived from the Cognito pool.")
    TOKEN_ALGORITHM: str = "RS256"
    TOKEN_AUDIENCE: Optional[str] = None
    TOKEN_ISSUER: Optional[str] = None
    JWKS_MIN_REFRESH_INTERVAL: float = Field(
        10.0, description="Seconds between key set refetches triggered by unknown key ids."
    )

    # Movie catalog
    TMDB_API_KEY: str = ""
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    HTTP_TIMEOUT: float = 10.0

    @property
    def jwks_url(self) -> str:
        if self.JWKS_URL:
            return self.JWKS_URL
        if not self.AWS_REGION or not self.COGNITO_USER_POOL_ID:
            raise ValueError(
                "Set MOVIE_GATE_JWKS_URL or both MOVIE_GATE_AWS_REGION and "
                "MOVIE_GATE_COGNITO_USER_POOL_ID."
            )
        return cognito_jwks_url(self.AWS_REGION, self.COGNITO_USER_POOL_ID)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
