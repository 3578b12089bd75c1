"""
Face service.

Resolves a player's skin, renders the face and serves it as PNG, keeping
two caches: rendered 8x8 faces per player, and encoded PNGs per
(player, scale). Network and CPU-heavy steps run in the threadpool so the
event loop keeps serving requests.
"""
from __future__ import annotations

import asyncio
import io
import logging
import uuid
import weakref
from typing import Optional, Tuple

from PIL import Image
from starlette.concurrency import run_in_threadpool

from domain.errors import EncodeError, ProfileLookupError
from domain.models import EncodedImage
from services.face_render import render_face, rescale
from services.memo_cache import MemoCache
from services.profile_client import PlayerTexture, ProfileClient, ProfileClientError
from services.skin_resolver import DefaultSkins, Skin, SkinResolver
from settings import settings

logger = logging.getLogger(__name__)

# 8px << 5 == 256px, the largest size the HTTP layer hands out.
MAX_SCALE = 5

FaceKey = Tuple[uuid.UUID, int]


class FaceCaches:
    def __init__(self, raw_capacity: int, encoded_capacity: int):
        self.raw_faces: MemoCache[uuid.UUID, Image.Image] = MemoCache(raw_capacity, name="raw_faces")
        self.faces: MemoCache[FaceKey, EncodedImage] = MemoCache(encoded_capacity, name="faces")

    def clear(self) -> None:
        self.raw_faces.clear()
        self.faces.clear()


async def _clear_periodically(caches_ref: "weakref.ref[FaceCaches]", interval: float) -> None:
    """Clear both caches every ``interval`` seconds until they are garbage collected."""
    while True:
        await asyncio.sleep(interval)
        caches = caches_ref()
        if caches is None:
            logger.debug("face caches are gone; stopping housekeeping")
            return
        logger.info(
            "clearing face caches (raw %s, encoded %s)",
            caches.raw_faces.get_stats(),
            caches.faces.get_stats(),
        )
        caches.clear()
        del caches


def encode_png(image: Image.Image) -> EncodedImage:
    buf = io.BytesIO()
    try:
        image.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodeError(f"failed to encode image: {exc}") from exc
    return EncodedImage.from_bytes(buf.getvalue())


class FaceService:
    def __init__(
        self,
        resolver: SkinResolver,
        profile_client: Optional[ProfileClient] = None,
        raw_cache_size: Optional[int] = None,
        encoded_cache_size: Optional[int] = None,
        clear_interval: Optional[float] = None,
    ):
        self.resolver = resolver
        self.profile_client = profile_client or ProfileClient()
        self.caches = FaceCaches(
            raw_capacity=raw_cache_size or settings.RAW_CACHE_SIZE,
            encoded_capacity=encoded_cache_size or settings.ENCODED_CACHE_SIZE,
        )
        self.clear_interval = clear_interval or settings.CACHE_CLEAR_INTERVAL
        self._housekeeping: Optional[asyncio.Task] = None

    @classmethod
    def create(cls, profile_client: Optional[ProfileClient] = None) -> "FaceService":
        """Build a service with the bundled default skins and settings-driven sizes."""
        return cls(SkinResolver(DefaultSkins.load()), profile_client=profile_client)

    async def get_face(self, player_id: uuid.UUID, scale: int) -> EncodedImage:
        """
        Return the PNG face for a player at 8 * 2**scale pixels.

        Raises ProfileLookupError when the identity service fails and
        EncodeError when the PNG cannot be written. A player without a
        usable skin gets their default skin instead.
        """
        if not 0 <= scale <= MAX_SCALE:
            raise ValueError(f"scale must be within [0, {MAX_SCALE}], got {scale}")
        return await self.caches.faces.get_or_load((player_id, scale), self._load_face)

    async def get_raw_face(self, player_id: uuid.UUID) -> Image.Image:
        return await self.caches.raw_faces.get_or_load(player_id, self._load_raw_face)

    async def _load_face(self, key: FaceKey) -> EncodedImage:
        player_id, scale = key
        raw_face = await self.get_raw_face(player_id)

        def _scale_and_encode() -> EncodedImage:
            face = rescale(raw_face, scale) if scale > 0 else raw_face
            return encode_png(face)

        return await run_in_threadpool(_scale_and_encode)

    async def _load_raw_face(self, player_id: uuid.UUID) -> Image.Image:
        skin = await self.get_skin(player_id)
        return await run_in_threadpool(render_face, skin)

    async def get_skin(self, player_id: uuid.UUID) -> Skin:
        texture = await self._fetch_texture(player_id)
        if texture is None:
            return self.resolver.resolve(player_id, None)
        return self.resolver.resolve(player_id, texture.image, texture.metadata)

    async def _fetch_texture(self, player_id: uuid.UUID) -> Optional[PlayerTexture]:
        try:
            return await run_in_threadpool(self.profile_client.fetch_profile_texture, player_id)
        except ProfileClientError as exc:
            raise ProfileLookupError(f"profile lookup failed for {player_id}: {exc}") from exc

    def start_housekeeping(self) -> asyncio.Task:
        """Start the periodic cache clear on the running loop (idempotent)."""
        if self._housekeeping is None or self._housekeeping.done():
            self._housekeeping = asyncio.ensure_future(
                _clear_periodically(weakref.ref(self.caches), self.clear_interval)
            )
        return self._housekeeping

    async def stop_housekeeping(self) -> None:
        task, self._housekeeping = self._housekeeping, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def clear_caches(self) -> None:
        self.caches.clear()
