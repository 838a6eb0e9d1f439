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
from typing import Optional, Any, Dict

import httpx
from pydantic import ValidationError as PydanticValidationError

from movie_gate.shared.exceptions import CatalogFetchFailed
from movie_gate.shared.models import MovieRecord, SearchResults

logger = logging.getLogger(__name__)

TMDB_BASE_URL = "https://api.themoviedb.org/3"


class CatalogClient:
    """
    Thin client for The Movie Database (TMDB) v3 API.

    Every non-success response, transport error or unusable body is reported as
    CatalogFetchFailed. Retrying is left to the caller.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = TMDB_BASE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        query = {"api_key": self.api_key, **(params or {})}
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=query)
        except httpx.HTTPError as e:
            logger.error(f"Catalog request to {path} failed: {e}")
            raise CatalogFetchFailed() from e

        if response.status_code != 200:
            logger.error(f"Catalog returned {response.status_code} for {path}")
            raise CatalogFetchFailed(upstream_status=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Catalog returned an undecodable body for {path}: {e}")
            raise CatalogFetchFailed(upstream_status=response.status_code) from e
        if not isinstance(payload, dict):
            logger.error(f"Catalog returned an unexpected body for {path}")
            raise CatalogFetchFailed(upstream_status=response.status_code)
        return payload

    async def get_by_id(self, movie_id: int) -> MovieRecord:
        payload = await self._get(f"/movie/{movie_id}")
        try:
            return MovieRecord.from_catalog(payload)
        except (KeyError, PydanticValidationError) as e:
            logger.error(f"Catalog movie {movie_id} is missing required fields: {e}")
            raise CatalogFetchFailed(upstream_status=200) from e

    async def search(self, query: str) -> Dict[str, Any]:
        payload = await self._get("/search/movie", params={"query": query})
        try:
            return SearchResults.model_validate(payload).model_dump()
        except PydanticValidationError as e:
            logger.error(f"Catalog search page for {query!r} is malformed: {e}")
            raise CatalogFetchFailed(upstream_status=200) from e
