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

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from movie_gate.cache.redis_cache import RedisCache
from movie_gate.catalog.tmdb import CatalogClient
from movie_gate.config import Settings
from movie_gate.resolver import CacheAsideResolver
from movie_gate.shared.jwks import KeyVerifier
from movie_gate.shared.validators import TokenAuthenticator
from movie_gate.store.database import Database
from movie_gate.store.favorites import FavoritesStore
from movie_gate.store.movies import RecordStore
from movie_gate.store.users import UserResolver

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a request handler needs, built once per process."""

    settings: Settings
    key_verifier: KeyVerifier
    authenticator: TokenAuthenticator
    database: Database
    cache: RedisCache
    record_store: RecordStore
    user_resolver: UserResolver
    favorites: FavoritesStore
    catalog: CatalogClient
    resolver: CacheAsideResolver

    async def close(self) -> None:
        await self.cache.close()
        await self.database.dispose()


def build_context(
    settings: Settings,
    cache: Optional[RedisCache] = None,
    database: Optional[Database] = None,
    jwks_transport: Optional[httpx.AsyncBaseTransport] = None,
    catalog_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AppContext:
    """
    Wires the service from settings.

    The optional arguments replace the corresponding collaborators, which is how
    tests run the service without Redis, MySQL or network access.
    """
    key_verifier = KeyVerifier(
        settings.jwks_url,
        algorithm=settings.TOKEN_ALGORITHM,
        timeout=settings.HTTP_TIMEOUT,
        transport=jwks_transport,
        min_refresh_interval=settings.JWKS_MIN_REFRESH_INTERVAL,
    )
    authenticator = TokenAuthenticator(
        key_verifier,
        algorithm=settings.TOKEN_ALGORITHM,
        audience=settings.TOKEN_AUDIENCE,
        issuer=settings.TOKEN_ISSUER,
    )
    database = database or Database(settings.DATABASE_URL)
    cache = cache or RedisCache.from_url(settings.REDIS_URL, ttl=settings.CACHE_TTL)
    record_store = RecordStore(database.session)
    catalog = CatalogClient(
        settings.TMDB_API_KEY,
        base_url=settings.TMDB_BASE_URL,
        timeout=settings.HTTP_TIMEOUT,
        transport=catalog_transport,
    )
    logger.info(f"Service context built for {settings.ENVIRONMENT.value} environment")
    return AppContext(
        settings=settings,
        key_verifier=key_verifier,
        authenticator=authenticator,
        database=database,
        cache=cache,
        record_store=record_store,
        user_resolver=UserResolver(database.session),
        favorites=FavoritesStore(database.session),
        catalog=catalog,
        resolver=CacheAsideResolver(cache, record_store, catalog, ttl=settings.CACHE_TTL),
    )
