"""
Client for the Mojang session server.

Looks up a player's profile, decodes the base64 ``textures`` property and
downloads the skin it points at. Calls are blocking; async callers should
run them in a threadpool.
"""
from __future__ import annotations

import base64
import binascii
import io
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from settings import settings

logger = logging.getLogger(__name__)

USER_AGENT = "skin-faces/0.1"
_session = requests.Session()
_session.headers.update({"User-Agent": USER_AGENT})


class ProfileClientError(Exception):
    """Transport, HTTP or decoding failure while talking to the identity service."""


class ProfileProperty(BaseModel):
    name: str
    value: str
    signature: Optional[str] = None


class PlayerTextureRef(BaseModel):
    url: str
    metadata: Dict[str, str] = Field(default_factory=dict)


class PlayerTextureUrls(BaseModel):
    skin: Optional[PlayerTextureRef] = Field(default=None, alias="SKIN")
    cape: Optional[PlayerTextureRef] = Field(default=None, alias="CAPE")


class PlayerTextures(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: Optional[int] = None
    profile_id: Optional[uuid.UUID] = Field(default=None, alias="profileId")
    profile_name: Optional[str] = Field(default=None, alias="profileName")
    refs: PlayerTextureUrls = Field(default_factory=PlayerTextureUrls, alias="textures")


class PlayerProfile(BaseModel):
    id: uuid.UUID
    name: str
    properties: List[ProfileProperty] = Field(default_factory=list)

    def decode_property(self, name: str) -> Optional[dict]:
        """Decode a base64 JSON property; None when missing or malformed."""
        prop = next((p for p in self.properties if p.name == name), None)
        if prop is None:
            return None
        try:
            return json.loads(base64.b64decode(prop.value, validate=True))
        except (binascii.Error, ValueError) as exc:
            logger.warning("profile %s: could not decode %s property: %s", self.id, name, exc)
            return None

    def textures(self) -> Optional[PlayerTextures]:
        data = self.decode_property("textures")
        if data is None:
            return None
        try:
            return PlayerTextures.model_validate(data)
        except ValidationError as exc:
            logger.warning("profile %s: malformed textures property: %s", self.id, exc)
            return None


@dataclass
class PlayerTexture:
    """A decoded RGBA skin and the metadata that came with it."""
    image: Image.Image
    metadata: Dict[str, str] = field(default_factory=dict)


def decode_texture(data: bytes, metadata: Optional[Dict[str, str]] = None) -> PlayerTexture:
    """
    Decode PNG bytes into an RGBA atlas.

    Indexed PNGs carrying a transparency chunk expand to RGBA; any other
    non-RGBA mode is rejected.
    """
    try:
        with Image.open(io.BytesIO(data), formats=["PNG"]) as img:
            img.load()
            if img.mode == "P" and "transparency" in img.info:
                image = img.convert("RGBA")
            elif img.mode == "RGBA":
                image = img.copy()
            else:
                raise ProfileClientError(f"invalid image format: {img.mode}")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as exc:
        raise ProfileClientError(f"could not decode texture: {exc}") from exc
    return PlayerTexture(image=image, metadata=dict(metadata or {}))


class ProfileClient:
    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = (endpoint or settings.PROFILE_ENDPOINT).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT
        self.session = session or _session

    def get_profile(self, player_id: uuid.UUID) -> Optional[PlayerProfile]:
        """Fetch a profile. Anything but HTTP 200 means the player is unknown."""
        logger.debug("getting player profile for %s", player_id)
        url = f"{self.endpoint}/{player_id.hex}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProfileClientError(f"profile request failed: {exc}") from exc

        if resp.status_code != 200:
            logger.debug("profile lookup for %s returned HTTP %s", player_id, resp.status_code)
            return None

        try:
            return PlayerProfile.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise ProfileClientError(f"malformed profile response: {exc}") from exc

    def get_texture(self, ref: PlayerTextureRef) -> PlayerTexture:
        logger.debug("requesting player skin at %s", ref.url)
        try:
            resp = self.session.get(ref.url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ProfileClientError(f"texture request failed: {exc}") from exc
        return decode_texture(resp.content, ref.metadata)

    def fetch_profile_texture(self, player_id: uuid.UUID) -> Optional[PlayerTexture]:
        """Return the player's skin, or None when they have none."""
        profile = self.get_profile(player_id)
        if profile is None:
            return None
        textures = profile.textures()
        if textures is None or textures.refs.skin is None:
            return None
        return self.get_texture(textures.refs.skin)
