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

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from movie_gate.shared.exceptions import ServiceException
from movie_gate.shared.models import IdentityClaims

logger = logging.getLogger(__name__)


class IdentifyMiddleware(BaseHTTPMiddleware):
    """
    Authenticates bearer tokens before any route runs.

    The verified claims are stored on ``request.state.identity``; requests
    without a bearer token pass through with ``identity = None`` and are turned
    away by ``require_auth`` on protected routes. A token that is present but
    fails verification is answered here, so no store or catalog work happens.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.identity = None
        authenticator = request.app.state.context.authenticator

        try:
            identity: Optional[IdentityClaims] = await authenticator.validate(request)
        except ServiceException as e:
            logger.warning(f"Authentication rejected for {request.url.path}: {e.detail}")
            return JSONResponse(status_code=e.status_code, content={"message": e.detail})
        except Exception as e:
            logger.error(f"Error during token validation: {e}", exc_info=True)
            return JSONResponse(status_code=500, content={"message": "Internal server error"})

        if identity:
            logger.debug(f"Authenticated subject {identity.sub} for {request.url.path}")
            request.state.identity = identity
        return await call_next(request)
