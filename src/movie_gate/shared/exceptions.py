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

from typing import Optional


class ServiceException(Exception):
    """
    Base class for every failure the service turns into an HTTP response.

    ``status_code`` and ``detail`` are rendered as ``{"message": detail}`` by the
    application's exception handler; anything more specific is only logged.
    """

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code if status_code is not None else self.status_code
        self.detail = detail if detail is not None else self.default_detail
        super().__init__(f"[{self.status_code}] {self.detail}")


# --- Categories ---

class AuthMissing(ServiceException):
    status_code = 401
    default_detail = "Access token missing"


class AuthInvalid(ServiceException):
    status_code = 401
    default_detail = "Invalid token"


class ValidationError(ServiceException):
    status_code = 400
    default_detail = "Invalid request"


class NotFound(ServiceException):
    status_code = 404
    default_detail = "Not found"


class UpstreamFailure(ServiceException):
    status_code = 500
    default_detail = "Upstream service failure"


class StoreFailure(ServiceException):
    status_code = 500
    default_detail = "Database error"


# --- Token verification ---

class TokenMissing(AuthMissing):
    pass


class TokenMalformed(AuthInvalid):
    pass


class KeyNotFound(AuthInvalid):
    pass


class SignatureInvalid(AuthInvalid):
    default_detail = "Token verification failed"


class KeyFetchFailed(UpstreamFailure):
    default_detail = "Internal server error"


# --- Movies, users and favorites ---

class CatalogFetchFailed(UpstreamFailure):
    default_detail = "Error fetching data from the movie catalog"

    def __init__(
        self,
        detail: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(detail)
        self.upstream_status = upstream_status

    @property
    def not_found(self) -> bool:
        return self.upstream_status == 404


class InvalidQuery(ValidationError):
    default_detail = "Missing search query"


class UserNotFound(NotFound):
    default_detail = "User not found in the database"


class FavoriteNotFound(NotFound):
    default_detail = "Movie not found in favorites"


class StoreError(StoreFailure):
    pass
