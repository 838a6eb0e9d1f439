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
import uuid
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from movie_gate.shared.exceptions import StoreError
from movie_gate.shared.models import MovieRecord
from movie_gate.store.database import DbCallable
from movie_gate.store.tables import Favourite, Movie

logger = logging.getLogger(__name__)


class FavoritesStore:

    def __init__(self, db_callable: DbCallable):
        self.db_callable = db_callable

    async def add(self, user_id: str, movie_id: int) -> bool:
        """
        Stores a favorite. The movie row must already exist.

        Returns:
            False if the user had already favorited the movie.
        """
        try:
            async with self.db_callable() as db:
                if await self._is_favorite(db, user_id, movie_id):
                    logger.info(f"Movie {movie_id} already in favorites of user {user_id}")
                    return False
                db.add(Favourite(id=str(uuid.uuid4()), user_id=user_id, movie_id=movie_id))
                await db.commit()
        except IntegrityError as e:
            # Only a concurrent insert of the same pair is a no-op; a missing
            # user or movie row is not.
            if await self._exists_after_conflict(user_id, movie_id):
                logger.info(f"Movie {movie_id} added to favorites of user {user_id} concurrently")
                return False
            logger.error(f"Integrity error adding favorite {movie_id} for user {user_id}: {e}")
            raise StoreError("Error adding movie to favorites") from e
        except SQLAlchemyError as e:
            logger.error(f"Database error adding favorite {movie_id} for user {user_id}: {e}")
            raise StoreError("Error adding movie to favorites") from e
        return True

    @staticmethod
    async def _is_favorite(db, user_id: str, movie_id: int) -> bool:
        result = await db.execute(
            select(Favourite.id).where(Favourite.user_id == user_id, Favourite.movie_id == movie_id)
        )
        return result.first() is not None

    async def _exists_after_conflict(self, user_id: str, movie_id: int) -> bool:
        try:
            async with self.db_callable() as db:
                return await self._is_favorite(db, user_id, movie_id)
        except SQLAlchemyError as e:
            logger.error(f"Database error re-reading favorite {movie_id} for user {user_id}: {e}")
            raise StoreError("Error adding movie to favorites") from e

    async def list_movies(self, user_id: str) -> List[MovieRecord]:
        stmt = (
            select(Movie)
            .join(Favourite, Favourite.movie_id == Movie.id)
            .where(Favourite.user_id == user_id)
            .order_by(Movie.id)
        )
        try:
            async with self.db_callable() as db:
                result = await db.execute(stmt)
                return [MovieRecord.model_validate(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Database error listing favorites of user {user_id}: {e}")
            raise StoreError("Error fetching favorite movies") from e

    async def remove(self, user_id: str, movie_id: int) -> bool:
        """Returns False when the movie was not among the user's favorites."""
        stmt = delete(Favourite).where(
            Favourite.user_id == user_id, Favourite.movie_id == movie_id
        )
        try:
            async with self.db_callable() as db:
                result = await db.execute(stmt)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Database error removing favorite {movie_id} for user {user_id}: {e}")
            raise StoreError("Error removing movie from favorites") from e
        return result.rowcount > 0
