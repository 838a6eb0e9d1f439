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

# conftest.py
import json
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import event
from sqlalchemy.pool import NullPool

from movie_gate.cache.redis_cache import RedisCache
from movie_gate.shared.models import MovieRecord
from movie_gate.store.database import Database

TEST_KID = "test-kid"
JWKS_URL = "https://cognito-idp.eu-west-1.amazonaws.com/eu-west-1_test/.well-known/jwks.json"
TMDB_BASE_URL = "https://api.themoviedb.test/3"

INCEPTION = {
    "id": 27205,
    "title": "Inception",
    "release_date": "2010-07-15",
    "overview": "Cobb, a skilled thief who commits corporate espionage by infiltrating the subconscious of his targets...",
    "poster_path": "/oYuLEt3zVCKq57qu2F8dT7NIa6f.jpg",
    "vote_average": 8.4,
}


def _private_pem() -> bytes:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _public_jwk(private_pem: bytes, kid: str) -> Dict[str, Any]:
    entry = jwk.construct(private_pem, "RS256").public_key().to_dict()
    entry.update({"kid": kid, "use": "sig"})
    return entry


@pytest.fixture(scope="session")
def signing_key() -> bytes:
    return _private_pem()


@pytest.fixture(scope="session")
def other_signing_key() -> bytes:
    return _private_pem()


@pytest.fixture(scope="session")
def jwks_document(signing_key) -> Dict[str, Any]:
    return {"keys": [_public_jwk(signing_key, TEST_KID)]}


@pytest.fixture
def make_token(signing_key) -> Callable[..., str]:
    def _make(
        sub: str = "cognito-sub-123",
        kid: Optional[str] = TEST_KID,
        key: Any = None,
        algorithm: str = "RS256",
        expires_in: int = 3600,
        **extra: Any,
    ) -> str:
        now = int(time.time())
        claims = {"sub": sub, "iat": now, "exp": now + expires_in, "token_use": "id", **extra}
        headers = {"kid": kid} if kid else {}
        return jwt.encode(claims, key or signing_key, algorithm=algorithm, headers=headers)

    return _make


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)


@pytest.fixture
def jwks_transport(jwks_document) -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(200, json=jwks_document))


@pytest.fixture
def catalog_movies() -> Dict[int, Dict[str, Any]]:
    return {INCEPTION["id"]: dict(INCEPTION)}


@pytest.fixture
def catalog_transport(catalog_movies) -> RecordingTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/search/movie"):
            query = request.url.params.get("query", "")
            results = [m for m in catalog_movies.values() if query.lower() in m["title"].lower()]
            return httpx.Response(
                200,
                json={"page": 1, "results": results, "total_pages": 1, "total_results": len(results)},
            )
        movie_id = int(path.rsplit("/", 1)[-1])
        if movie_id in catalog_movies:
            return httpx.Response(200, json=catalog_movies[movie_id])
        return httpx.Response(
            404, json={"status_code": 34, "status_message": "The resource you requested could not be found."}
        )

    return RecordingTransport(handler)


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis (decode_responses=True)."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.closed = False

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def aclose(self) -> None:
        self.closed = True

    def load(self, key: str) -> Any:
        return json.loads(self.data[key])


class BrokenRedis(FakeRedis):
    """A Redis that is down."""

    async def get(self, key: str) -> Optional[str]:
        raise RedisConnectionError("Connection refused")

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        raise RedisConnectionError("Connection refused")


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis) -> RedisCache:
    return RedisCache(fake_redis, ttl=3600)


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'movies.db'}"


def make_test_database(url: str) -> Database:
    db = Database(url, poolclass=NullPool)

    # SQLite: enforce foreign keys like MySQL does, and take the write lock up
    # front so concurrent writers queue on the busy timeout instead of failing
    # on lock promotion.
    @event.listens_for(db.engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(db.engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return db


@pytest_asyncio.fixture
async def database(database_url):
    db = make_test_database(database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def inception_record() -> MovieRecord:
    return MovieRecord.from_catalog(INCEPTION)
