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
# File: fastapi_middleware/tools.py

"""
FastAPI dependencies forming the request pipeline.

Protected routes chain them in order: ``require_auth`` -> (``require_search_query``)
-> ``require_local_user`` -> handler. Each step either returns what the next one
needs or raises a ServiceException, so a handler only runs when every earlier
step succeeded.
"""

import logging
from typing import Optional

from fastapi import Depends, Query, Request

from movie_gate.context import AppContext
from movie_gate.shared.exceptions import InvalidQuery, TokenMissing
from movie_gate.shared.models import IdentityClaims, LocalUser

logger = logging.getLogger(__name__)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_current_identity(request: Request) -> Optional[IdentityClaims]:
    """Claims set by IdentifyMiddleware, or None for anonymous requests."""
    return getattr(request.state, "identity", None)


def require_auth(
    identity: Optional[IdentityClaims] = Depends(get_current_identity),
) -> IdentityClaims:
    """
    Requires an authenticated caller.

    Usage:
        @router.get("/secure-data")
        async def secure_data(claims: IdentityClaims = Depends(require_auth)):
            return {"sub": claims.sub}
    """
    if not identity:
        logger.info("require_auth: no identity on request, raising 401.")
        raise TokenMissing()
    return identity


def require_search_query(q: Optional[str] = Query(None)) -> str:
    if q is None or not q.strip():
        raise InvalidQuery()
    return q


async def require_local_user(
    claims: IdentityClaims = Depends(require_auth),
    context: AppContext = Depends(get_context),
) -> LocalUser:
    return await context.user_resolver.resolve(claims)
