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
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from movie_gate.shared.exceptions import StoreError
from movie_gate.shared.models import MovieRecord
from movie_gate.store.database import DbCallable
from movie_gate.store.tables import Movie

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Durable movie records keyed by catalog id.

    Records are never updated. When two writers insert the same id, the first
    commit wins and the second insert is reported as a no-op.
    """

    def __init__(self, db_callable: DbCallable):
        self.db_callable = db_callable

    async def get_by_id(self, movie_id: int) -> Optional[MovieRecord]:
        try:
            async with self.db_callable() as db:
                result = await db.execute(select(Movie).where(Movie.id == movie_id))
                row = result.scalar_one_or_none()
                return MovieRecord.model_validate(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Database error fetching movie {movie_id}: {e}")
            raise StoreError("Database error fetching movie") from e

    async def insert(self, record: MovieRecord) -> bool:
        """
        Returns:
            True if this call stored the record, False if it was already there.
        """
        try:
            async with self.db_callable() as db:
                db.add(Movie(**record.model_dump()))
                await db.commit()
        except IntegrityError:
            logger.info(f"Movie {record.id} already stored by another writer")
            return False
        except SQLAlchemyError as e:
            logger.error(f"Database error storing movie {record.id}: {e}")
            raise StoreError("Error storing movie in database") from e
        logger.info(f"Stored movie {record.id}")
        return True
