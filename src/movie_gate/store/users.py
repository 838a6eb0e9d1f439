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

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from movie_gate.shared.exceptions import StoreError, UserNotFound
from movie_gate.shared.models import IdentityClaims, LocalUser
from movie_gate.store.database import DbCallable
from movie_gate.store.tables import User

logger = logging.getLogger(__name__)


class UserResolver:
    """Maps an authenticated subject to the local user created at signup."""

    def __init__(self, db_callable: DbCallable):
        self.db_callable = db_callable

    async def resolve(self, claims: IdentityClaims) -> LocalUser:
        try:
            async with self.db_callable() as db:
                result = await db.execute(select(User).where(User.provider_id == claims.sub))
                row = result.scalar_one_or_none()
                user = LocalUser.model_validate(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Database error fetching user {claims.sub}: {e}")
            raise StoreError("Database error fetching user") from e

        if user is None:
            logger.info(f"No local user for subject {claims.sub}")
            raise UserNotFound()
        return user
