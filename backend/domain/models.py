"""
Core domain models for the face service.
These are framework-agnostic and can be used across all services.
"""
import base64
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


PNG_CONTENT_TYPE = "image/png"


class ModelFlag(str, Enum):
    """Arm thickness of the player model a skin was painted for."""
    WIDE = "wide"
    SLIM = "slim"

    @classmethod
    def from_metadata(cls, metadata: Optional[Mapping[str, str]]) -> "ModelFlag":
        """Texture metadata only ever carries ``model: slim``; anything else is wide."""
        if metadata and metadata.get("model") == "slim":
            return cls.SLIM
        return cls.WIDE


class DefaultSkin(str, Enum):
    """Built-in atlases used when a player has no usable skin."""
    STEVE = "steve"  # wide arms
    ALEX = "alex"  # slim arms


def fingerprint(data: bytes) -> str:
    """SHA-1 of the payload as unpadded URL-safe base64."""
    digest = hashlib.sha1(data).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


@dataclass(frozen=True)
class EncodedImage:
    """
    An encoded face ready to be served.

    The fingerprint doubles as the HTTP ETag; it is derived from the bytes
    so identical renders always validate against each other.
    """
    data: bytes
    fingerprint: str
    content_type: str = PNG_CONTENT_TYPE

    @classmethod
    def from_bytes(cls, data: bytes, content_type: str = PNG_CONTENT_TYPE) -> "EncodedImage":
        return cls(data=data, fingerprint=fingerprint(data), content_type=content_type)

    def matches(self, candidate: Optional[str]) -> bool:
        if candidate is None:
            return False
        return self.fingerprint == candidate
