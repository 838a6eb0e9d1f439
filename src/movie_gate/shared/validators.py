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
from typing import Optional, Any, Dict

from jose import jwt

from movie_gate.shared.exceptions import TokenMissing, TokenMalformed, SignatureInvalid
from movie_gate.shared.jwks import KeyVerifier
from movie_gate.shared.jwt_utils import extract_bearer_token, read_unverified_header
from movie_gate.shared.models import IdentityClaims

logger = logging.getLogger(__name__)


class TokenAuthenticator:
    """
    Validates bearer tokens issued by the identity provider (e.g. a Cognito user pool).

    Exactly one signing algorithm is accepted. The signing key is resolved through
    the KeyVerifier using the 'kid' in the token header. Authentication only
    establishes who the caller is; deciding what they may access is left to the
    routes.
    """

    def __init__(
        self,
        key_verifier: KeyVerifier,
        algorithm: str = "RS256",
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        header_key: str = "Authorization",
        scheme: str = "Bearer",
    ):
        self.key_verifier = key_verifier
        self.algorithm = algorithm
        self.audience = audience
        self.issuer = issuer
        self.header_key = header_key
        self.scheme = scheme

    def _decode_options(self) -> Dict[str, bool]:
        return {
            "verify_signature": True,
            "verify_exp": True,
            "verify_aud": self.audience is not None,
            "verify_iss": self.issuer is not None,
            # Cognito ID tokens carry at_hash but the access token is not sent along.
            "verify_at_hash": False,
        }

    async def authenticate(self, token: Optional[str]) -> IdentityClaims:
        if not token:
            raise TokenMissing()

        header = read_unverified_header(token)
        if header.get("alg") != self.algorithm:
            logger.warning(f"Rejected token signed with {header.get('alg')!r}")
            raise SignatureInvalid()

        key = await self.key_verifier.get_key(header["kid"])

        try:
            payload = jwt.decode(
                token,
                key.to_pem(),
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options=self._decode_options(),
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise SignatureInvalid() from e
        except jwt.JWTClaimsError as e:
            logger.warning(f"Token claims invalid: {e}")
            raise SignatureInvalid() from e
        except jwt.JWTError as e:
            logger.warning(f"Token signature invalid: {e}")
            raise SignatureInvalid() from e

        if not payload.get("sub"):
            logger.warning("Verified token carries no 'sub' claim")
            raise TokenMalformed()

        claims = IdentityClaims.from_payload(payload, token=token)
        logger.debug(f"Token validated for subject {claims.sub}")
        return claims

    async def validate(self, request: Any) -> Optional[IdentityClaims]:
        """
        Authenticates the request's bearer token, if it has one.

        Returns None when no bearer token is present so that public routes keep
        working; a token that is present but invalid raises.
        """
        token = extract_bearer_token(request.headers.get(self.header_key), self.scheme)
        if token is None:
            return None
        return await self.authenticate(token)
