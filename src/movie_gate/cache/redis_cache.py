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
Best-effort JSON cache on top of Redis.

The cache is an optimization only: a failed read is reported as a miss and a
failed write is logged and dropped, so callers never see a Redis error.
"""

import json
import logging
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600


class RedisCache:

    def __init__(self, client: "aioredis.Redis", ttl: int = DEFAULT_TTL):
        self.client = client
        self.ttl = ttl

    @classmethod
    def from_url(cls, url: str, ttl: int = DEFAULT_TTL) -> "RedisCache":
        return cls(aioredis.from_url(url, decode_responses=True), ttl=ttl)

    async def get_json(self, key: str) -> Optional[Any]:
        try:
            value = await self.client.get(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Cache get error for {key}: {e}")
            return None

        if value is None:
            logger.debug(f"Cache MISS: {key}")
            return None

        try:
            decoded = json.loads(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring undecodable cache entry {key}: {e}")
            return None
        logger.debug(f"Cache HIT: {key}")
        return decoded

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        ttl = ttl if ttl is not None else self.ttl
        try:
            await self.client.setex(key, ttl, json.dumps(value))
        except (RedisError, OSError, TypeError, ValueError) as e:
            logger.warning(f"Cache set error for {key}: {e}")
            return False
        logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")
        return True

    async def close(self) -> None:
        try:
            await self.client.aclose()
        except (RedisError, OSError) as e:
            logger.warning(f"Error closing Redis connection: {e}")
