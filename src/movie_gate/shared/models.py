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

from typing import Optional, Dict, Any, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class IdentityClaims(BaseModel):
    model_config = ConfigDict(frozen=True)

    sub: str = Field(..., description="Stable subject identifier issued by the identity provider.")
    exp: Optional[int] = Field(None, description="Expiration timestamp (Unix epoch).")
    iat: Optional[int] = Field(None, description="Issued-at timestamp (Unix epoch).")
    iss: Optional[str] = Field(None, description="Token issuer.")
    email: Optional[str] = Field(None, description="User's email address, when the token carries one.")
    token_use: Optional[str] = Field(None, description="Cognito 'token_use' claim ('id' or 'access').")
    claims: Dict[str, Any] = Field(default_factory=dict, description="All claims from the verified token.")
    token: Optional[str] = Field(None, description="The raw bearer token.")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], token: Optional[str] = None) -> "IdentityClaims":
        return cls(
            sub=payload["sub"],
            exp=payload.get("exp"),
            iat=payload.get("iat"),
            iss=payload.get("iss"),
            email=payload.get("email"),
            token_use=payload.get("token_use"),
            claims=payload,
            token=token,
        )


class LocalUser(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    provider_id: str = Field(..., description="Identity provider subject ('sub') this user maps to.")
    username: Optional[str] = None
    email: Optional[str] = None


class MovieRecord(BaseModel):
    """A movie as stored locally. Records never change once written."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    title: str
    release_date: Optional[str] = None
    overview: Optional[str] = None
    poster_url: Optional[str] = None

    @field_validator("release_date", "overview", "poster_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_catalog(cls, payload: Dict[str, Any]) -> "MovieRecord":
        return cls(
            id=payload["id"],
            title=payload["title"],
            release_date=payload.get("release_date"),
            overview=payload.get("overview"),
            poster_url=payload.get("poster_path"),
        )


class Message(BaseModel):
    message: str


class FavoriteRequest(BaseModel):
    movie_id: int = Field(..., alias="movieId")


class SearchResults(BaseModel):
    """Catalog search page. Extra catalog fields are passed through untouched."""

    model_config = ConfigDict(extra="allow")

    results: List[Dict[str, Any]] = Field(default_factory=list)
