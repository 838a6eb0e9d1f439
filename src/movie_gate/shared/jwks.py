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
import time
from dataclasses import dataclass
from typing import Optional, Any, Dict

import httpx
from jose import jwk, exceptions

from movie_gate.shared.exceptions import KeyNotFound, KeyFetchFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationKey:
    kid: str
    algorithm: str
    key: Any  # jose.backends key object

    def to_pem(self) -> bytes:
        return self.key.to_pem()


class KeyVerifier:
    """
    Resolves signing keys published by the identity provider.

    The key set is fetched on demand and kept in memory, keyed by 'kid'. A lookup
    for a key id that is not cached triggers a refetch, so rotated keys are
    picked up without a restart. Miss-triggered refetches happen at most once per
    min_refresh_interval seconds. Concurrent refetches may overlap; the last one to finish wins.
    """

    def __init__(
        self,
        jwks_url: str,
        algorithm: str = "RS256",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        min_refresh_interval: float = 10.0,
    ):
        """
        Args:
            jwks_url: The provider's key set URL (e.g. Cognito's '/.well-known/jwks.json').
            algorithm: The algorithm every published key is built for.
            timeout: Seconds allowed for the key set request.
            transport: Optional httpx transport, used by tests to stub the endpoint.
            min_refresh_interval: Seconds to wait after a fetch before an unknown
                key id may trigger another one.
        """
        self.jwks_url = jwks_url
        self.algorithm = algorithm
        self.timeout = timeout
        self._transport = transport
        self.min_refresh_interval = min_refresh_interval
        self._keys: Dict[str, VerificationKey] = {}
        self._keys_timestamp: Optional[float] = None

    async def _fetch_key_set(self) -> Dict[str, VerificationKey]:
        logger.info(f"Fetching JWKS from {self.jwks_url}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(self.jwks_url)
                resp.raise_for_status()
                entries = resp.json().get("keys", [])
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"Error fetching JWKS from {self.jwks_url}: {e}")
            raise KeyFetchFailed() from e

        keys: Dict[str, VerificationKey] = {}
        for entry in entries:
            kid = entry.get("kid") if isinstance(entry, dict) else None
            if not kid:
                continue
            try:
                material = {"kty": entry.get("kty", "RSA"), "n": entry["n"], "e": entry["e"]}
                keys[kid] = VerificationKey(
                    kid=kid,
                    algorithm=self.algorithm,
                    key=jwk.construct(material, self.algorithm),
                )
            except (KeyError, ValueError, exceptions.JWKError) as e:
                logger.warning(f"Skipping unusable JWKS entry {kid}: {e}")
        return keys

    async def refresh(self) -> None:
        keys = await self._fetch_key_set()
        self._keys.update(keys)
        self._keys_timestamp = time.time()

    def _refresh_allowed(self) -> bool:
        if self._keys_timestamp is None:
            return True
        return time.time() >= self._keys_timestamp + self.min_refresh_interval

    async def get_key(self, kid: str) -> VerificationKey:
        key = self._keys.get(kid)
        if key is not None:
            return key

        if self._refresh_allowed():
            await self.refresh()
            key = self._keys.get(kid)
        if key is None:
            logger.warning(f"No published key matches kid {kid}")
            raise KeyNotFound()
        return key
