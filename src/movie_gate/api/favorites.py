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
from typing import List

from fastapi import APIRouter, Depends

from movie_gate.context import AppContext
from movie_gate.fastapi_middleware.tools import get_context, require_local_user
from movie_gate.shared.exceptions import (
    FavoriteNotFound,
    ServiceException,
    StoreFailure,
    UpstreamFailure,
)
from movie_gate.shared.models import FavoriteRequest, LocalUser, Message, MovieRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.post("", status_code=201, response_model=Message)
async def add_favorite(
    body: FavoriteRequest,
    user: LocalUser = Depends(require_local_user),
    context: AppContext = Depends(get_context),
) -> Message:
    try:
        # The cache is not authoritative, so go to the store for the row the FK needs.
        await context.resolver.ensure_stored(body.movie_id)
        await context.favorites.add(user.id, body.movie_id)
    except (UpstreamFailure, StoreFailure) as e:
        logger.error(f"Error adding movie {body.movie_id} to favorites of user {user.id}: {e}")
        raise ServiceException("Error adding movie to favorites") from e
    return Message(message="Movie added to favorites successfully!")


@router.get("", response_model=List[MovieRecord])
async def list_favorites(
    user: LocalUser = Depends(require_local_user),
    context: AppContext = Depends(get_context),
) -> List[MovieRecord]:
    try:
        return await context.favorites.list_movies(user.id)
    except StoreFailure as e:
        logger.error(f"Error fetching favorites of user {user.id}: {e}")
        raise ServiceException("Error fetching favorite movies") from e


@router.delete("/{movie_id}", response_model=Message)
async def remove_favorite(
    movie_id: int,
    user: LocalUser = Depends(require_local_user),
    context: AppContext = Depends(get_context),
) -> Message:
    try:
        removed = await context.favorites.remove(user.id, movie_id)
    except StoreFailure as e:
        logger.error(f"Error removing movie {movie_id} from favorites of user {user.id}: {e}")
        raise ServiceException("Error removing movie from favorites") from e
    if not removed:
        raise FavoriteNotFound()
    return Message(message="Movie removed from favorites successfully!")
