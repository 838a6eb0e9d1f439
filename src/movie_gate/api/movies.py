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
from typing import Any, Dict

from fastapi import APIRouter, Depends

from movie_gate.context import AppContext
from movie_gate.fastapi_middleware.tools import (
    get_context,
    require_auth,
    require_local_user,
    require_search_query,
)
from movie_gate.shared.exceptions import (
    CatalogFetchFailed,
    ServiceException,
    StoreFailure,
    UpstreamFailure,
)
from movie_gate.shared.models import IdentityClaims, LocalUser, MovieRecord

logger = logging.getLogger(__name__)

router = APIRouter(tags=["movies"])


# Must stay above /movies/{movie_id}.
@router.get("/movies/search")
async def search_movies(
    claims: IdentityClaims = Depends(require_auth),
    q: str = Depends(require_search_query),
    user: LocalUser = Depends(require_local_user),
    context: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    try:
        return await context.resolver.search(q)
    except UpstreamFailure as e:
        logger.error(f"Error fetching movie data for user {user.id}: {e}")
        raise ServiceException("Error fetching movie data") from e


@router.get("/movies/{movie_id}", response_model=MovieRecord)
async def read_movie(
    movie_id: int,
    claims: IdentityClaims = Depends(require_auth),
    context: AppContext = Depends(get_context),
) -> MovieRecord:
    try:
        return await context.resolver.resolve(movie_id)
    except CatalogFetchFailed as e:
        if e.not_found:
            logger.info(f"Movie {movie_id} does not exist in the catalog")
        else:
            logger.error(f"Error fetching movie {movie_id} from the catalog: {e}")
        raise ServiceException("Error fetching movie details") from e
    except (UpstreamFailure, StoreFailure) as e:
        logger.error(f"Error resolving movie {movie_id}: {e}")
        raise ServiceException("Error fetching movie details") from e
