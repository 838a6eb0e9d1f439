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
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from movie_gate.api import favorites, movies
from movie_gate.config import Settings, get_settings
from movie_gate.context import AppContext, build_context
from movie_gate.fastapi_middleware.fastapi_identify import IdentifyMiddleware
from movie_gate.shared.exceptions import ServiceException

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """
    Builds the FastAPI application.

    Args:
        settings: Defaults to ``get_settings()``.
        context: A prebuilt AppContext; built from settings when omitted.
    """
    settings = settings or get_settings()
    context = context or build_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down, releasing connections.")
        await app.state.context.close()

    app = FastAPI(title="movie-gate", lifespan=lifespan)
    app.state.context = context

    app.add_middleware(IdentifyMiddleware)
    app.add_exception_handler(ServiceException, service_exception_handler)

    app.include_router(movies.router, prefix=API_PREFIX)
    app.include_router(favorites.router, prefix=API_PREFIX)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    return app
