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

import uvicorn

from movie_gate.api.app import configure_logging, create_app
from movie_gate.config import get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings.LOGGING_LEVEL)
    logger = logging.getLogger(__name__)

    app = create_app(settings)
    logger.info(f"Starting movie-gate on {settings.HOST}:{settings.PORT}")
    if not settings.TMDB_API_KEY:
        logger.warning("MOVIE_GATE_TMDB_API_KEY is not set; catalog lookups will fail.")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
