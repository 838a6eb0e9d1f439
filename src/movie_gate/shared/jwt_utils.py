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
from typing import Mapping, Any, Optional

from jose import jwt, exceptions

from movie_gate.shared.exceptions import TokenMalformed

logger = logging.getLogger(__name__)

COGNITO_ISSUER_TEMPLATE = "https://cognito-idp.{region}.amazonaws.com/{user_pool_id}"
JWKS_PATH = "/.well-known/jwks.json"


def cognito_issuer(region: str, user_pool_id: str) -> str:
    return COGNITO_ISSUER_TEMPLATE.format(region=region, user_pool_id=user_pool_id)


def cognito_jwks_url(region: str, user_pool_id: str) -> str:
    """Key set endpoint a Cognito user pool publishes its signing keys on."""
    return cognito_issuer(region, user_pool_id) + JWKS_PATH


def extract_bearer_token(auth_header: Optional[str], scheme: str = "bearer") -> Optional[str]:
    """
    Returns the credentials part of an ``Authorization`` header.

    ``None`` means the header is absent, uses another scheme or carries no
    credentials; callers treat all three as "no token supplied".
    """
    if not auth_header:
        return None
    try:
        auth_type, creds = auth_header.strip().split(" ", 1)
    except ValueError:
        return None
    if auth_type.lower() != scheme.lower():
        return None
    creds = creds.strip()
    return creds or None


def read_unverified_header(token: str) -> Mapping[str, Any]:
    """
    Decodes the token header without checking the signature.

    Raises:
        TokenMalformed: if the token cannot be decoded or names no key id.
    """
    try:
        header = jwt.get_unverified_header(token)
    except exceptions.JWTError as e:
        logger.info(f"Could not decode token header: {e}")
        raise TokenMalformed() from e
    kid = header.get("kid")
    if not isinstance(kid, str) or not kid:
        logger.info(f"Token header has no usable 'kid': {kid!r}")
        raise TokenMalformed()
    return header
