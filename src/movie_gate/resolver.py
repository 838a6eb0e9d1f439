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

"""
Cache-aside resolution of movie records and catalog searches.

Movie lookups go cache -> record store -> catalog, writing back to the store
(first writer wins) and then to the cache. Searches go cache -> catalog and are
only ever cached, never stored.
"""

import logging
from typing import Optional, Any, Dict

from pydantic import ValidationError as PydanticValidationError

from movie_gate.cache.redis_cache import RedisCache, DEFAULT_TTL
from movie_gate.catalog.tmdb import CatalogClient
from movie_gate.shared.exceptions import InvalidQuery
from movie_gate.shared.models import MovieRecord
from movie_gate.store.movies import RecordStore

logger = logging.getLogger(__name__)

MOVIE_KEY_PREFIX = "movieid_"
SEARCH_KEY_PREFIX = "movie_search_"

_MARKUP_ESCAPES = str.maketrans({
    "&": "&amp;",
    '"': "&quot;",
    "'": "&#x27;",
    "<": "&lt;",
    ">": "&gt;",
    "/": "&#x2F;",
    "\\": "&#x5C;",
    "`": "&#96;",
})


def sanitize_query(query: str) -> str:
    """HTML-escapes markup-significant characters, then trims whitespace."""
    return query.translate(_MARKUP_ESCAPES).strip()


def movie_cache_key(movie_id: int) -> str:
    return f"{MOVIE_KEY_PREFIX}{movie_id}"


def search_cache_key(sanitized_query: str) -> str:
    return f"{SEARCH_KEY_PREFIX}{sanitized_query}"


class CacheAsideResolver:

    def __init__(
        self,
        cache: RedisCache,
        store: RecordStore,
        catalog: CatalogClient,
        ttl: int = DEFAULT_TTL,
    ):
        self.cache = cache
        self.store = store
        self.catalog = catalog
        self.ttl = ttl

    async def ensure_stored(self, movie_id: int) -> MovieRecord:
        """
        Returns the stored record for movie_id, fetching and storing it first if needed.

        Raises:
            CatalogFetchFailed: the movie is not stored and the catalog lookup failed.
            StoreError: the record store could not be read or written.
        """
        record = await self.store.get_by_id(movie_id)
        if record is not None:
            return record

        record = await self.catalog.get_by_id(movie_id)
        # A concurrent writer may have stored it meanwhile; both copies are identical.
        await self.store.insert(record)
        return record

    async def _cached_movie(self, movie_id: int) -> Optional[MovieRecord]:
        cached = await self.cache.get_json(movie_cache_key(movie_id))
        if cached is None:
            return None
        try:
            return MovieRecord.model_validate(cached)
        except PydanticValidationError as e:
            logger.warning(f"Discarding malformed cache entry for movie {movie_id}: {e}")
            return None

    async def resolve(self, movie_id: int) -> MovieRecord:
        record = await self._cached_movie(movie_id)
        if record is not None:
            return record

        record = await self.ensure_stored(movie_id)
        await self.cache.set_json(movie_cache_key(movie_id), record.model_dump(), ttl=self.ttl)
        return record

    async def search(self, query: Optional[str]) -> Dict[str, Any]:
        if query is None or not query.strip():
            raise InvalidQuery()

        safe_query = sanitize_query(query)
        key = search_cache_key(safe_query)

        cached = await self.cache.get_json(key)
        if isinstance(cached, dict):
            return cached

        results = await self.catalog.search(safe_query)
        await self.cache.set_json(key, results, ttl=self.ttl)
        return results
