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

# tests/test_identity.py
import time
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import Depends, FastAPI
from starlette.testclient import TestClient

from movie_gate.api.app import service_exception_handler
from movie_gate.fastapi_middleware.fastapi_identify import IdentifyMiddleware
from movie_gate.fastapi_middleware.tools import (
    get_current_identity,
    require_auth,
    require_local_user,
    require_search_query,
)
from movie_gate.shared.exceptions import (
    KeyFetchFailed,
    ServiceException,
    SignatureInvalid,
    StoreError,
    UserNotFound,
)
from movie_gate.shared.models import IdentityClaims, LocalUser


@pytest.fixture
def identity():
    return IdentityClaims(sub="12345", exp=int(time.time() + 3600), email="test@example.com")


@pytest.fixture
def local_user():
    return LocalUser(id="u-1", provider_id="12345", username="tester", email="test@example.com")


@pytest.fixture
def app_with_middleware(local_user):
    app = FastAPI()

    authenticator = AsyncMock()
    authenticator.validate = AsyncMock(return_value=None)
    user_resolver = AsyncMock()
    user_resolver.resolve = AsyncMock(return_value=local_user)
    app.state.context = SimpleNamespace(authenticator=authenticator, user_resolver=user_resolver)

    app.add_middleware(IdentifyMiddleware)
    app.add_exception_handler(ServiceException, service_exception_handler)

    @app.get("/public")
    async def public(identity=Depends(get_current_identity)):
        return {"sub": identity.sub if identity else None}

    @app.get("/secure")
    async def secure(claims: IdentityClaims = Depends(require_auth)):
        return {"sub": claims.sub}

    @app.get("/profile")
    async def profile(
        claims: IdentityClaims = Depends(require_auth),
        q: str = Depends(require_search_query),
        user: LocalUser = Depends(require_local_user),
    ):
        return {"user": user.id, "q": q}

    return {
        "client": TestClient(app),
        "authenticator": authenticator,
        "user_resolver": user_resolver,
    }


def test_public_endpoint_without_token(app_with_middleware):
    response = app_with_middleware["client"].get("/public")
    assert response.status_code == 200
    assert response.json() == {"sub": None}


def test_public_endpoint_sees_identity(app_with_middleware, identity):
    app_with_middleware["authenticator"].validate.return_value = identity
    response = app_with_middleware["client"].get("/public", headers={"Authorization": "Bearer t"})
    assert response.json() == {"sub": "12345"}


def test_secure_endpoint_without_token(app_with_middleware):
    response = app_with_middleware["client"].get("/secure")
    assert response.status_code == 401
    assert response.json() == {"message": "Access token missing"}


def test_secure_endpoint_with_identity(app_with_middleware, identity):
    app_with_middleware["authenticator"].validate.return_value = identity
    response = app_with_middleware["client"].get("/secure", headers={"Authorization": "Bearer t"})
    assert response.status_code == 200
    assert response.json() == {"sub": "12345"}


def test_invalid_token_short_circuits(app_with_middleware):
    app_with_middleware["authenticator"].validate.side_effect = SignatureInvalid()
    response = app_with_middleware["client"].get("/profile?q=x", headers={"Authorization": "Bearer bad"})

    assert response.status_code == 401
    assert response.json() == {"message": "Token verification failed"}
    app_with_middleware["user_resolver"].resolve.assert_not_called()


def test_key_fetch_failure_is_500(app_with_middleware):
    app_with_middleware["authenticator"].validate.side_effect = KeyFetchFailed()
    response = app_with_middleware["client"].get("/secure", headers={"Authorization": "Bearer t"})
    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


def test_unexpected_validation_error_is_500(app_with_middleware):
    app_with_middleware["authenticator"].validate.side_effect = RuntimeError("Something went very wrong")
    response = app_with_middleware["client"].get("/secure", headers={"Authorization": "Bearer t"})
    assert response.status_code == 500
    assert "went very wrong" not in response.text


def test_pipeline_runs_user_lookup_last(app_with_middleware, identity):
    app_with_middleware["authenticator"].validate.return_value = identity
    client = app_with_middleware["client"]

    response = client.get("/profile", headers={"Authorization": "Bearer t"})
    assert response.status_code == 400
    assert response.json() == {"message": "Missing search query"}
    app_with_middleware["user_resolver"].resolve.assert_not_called()

    response = client.get("/profile?q=Inception", headers={"Authorization": "Bearer t"})
    assert response.status_code == 200
    assert response.json() == {"user": "u-1", "q": "Inception"}
    app_with_middleware["user_resolver"].resolve.assert_awaited_once_with(identity)


def test_unauthenticated_request_is_401_before_query_check(app_with_middleware):
    response = app_with_middleware["client"].get("/profile")
    assert response.status_code == 401


@pytest.mark.parametrize(
    "error,status,message",
    [
        (UserNotFound(), 404, "User not found in the database"),
        (StoreError("Database error fetching user"), 500, "Database error fetching user"),
    ],
)
def test_user_resolution_failures(app_with_middleware, identity, error, status, message):
    app_with_middleware["authenticator"].validate.return_value = identity
    app_with_middleware["user_resolver"].resolve.side_effect = error

    response = app_with_middleware["client"].get("/profile?q=x", headers={"Authorization": "Bearer t"})
    assert response.status_code == status
    assert response.json() == {"message": message}
