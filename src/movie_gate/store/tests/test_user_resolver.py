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

from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from movie_gate.shared.exceptions import StoreError, UserNotFound
from movie_gate.shared.models import IdentityClaims
from movie_gate.store.tables import User
from movie_gate.store.users import UserResolver


@pytest_asyncio.fixture
async def seeded(database):
    async with database.session() as db:
        db.add(User(id="u-1", provider_id="cognito-sub-123", username="kisaw", email="kisaw@example.com"))
        await db.commit()
    return database


@pytest.mark.asyncio
async def test_resolves_user_by_provider_id(seeded):
    resolver = UserResolver(seeded.session)
    user = await resolver.resolve(IdentityClaims(sub="cognito-sub-123"))

    assert user.id == "u-1"
    assert user.provider_id == "cognito-sub-123"
    assert user.username == "kisaw"
    assert user.email == "kisaw@example.com"


@pytest.mark.asyncio
async def test_resolve_is_repeatable(seeded):
    resolver = UserResolver(seeded.session)
    claims = IdentityClaims(sub="cognito-sub-123")
    assert await resolver.resolve(claims) == await resolver.resolve(claims)


@pytest.mark.asyncio
async def test_unknown_subject(seeded):
    resolver = UserResolver(seeded.session)
    with pytest.raises(UserNotFound) as exc_info:
        await resolver.resolve(IdentityClaims(sub="someone-else"))
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_database_failure():
    def broken_session():
        raise OperationalError("SELECT", {}, Exception("server has gone away"))

    resolver = UserResolver(MagicMock(side_effect=broken_session))
    with pytest.raises(StoreError) as exc_info:
        await resolver.resolve(IdentityClaims(sub="cognito-sub-123"))
    assert exc_info.value.detail == "Database error fetching user"
