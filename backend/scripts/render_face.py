"""Render a single face to a PNG file without running the server.

Usage:
    python -m scripts.render_face --uuid <player uuid> --size 64 -o face.png
    python -m scripts.render_face --skin path/to/skin.png [--slim] --size 128 -o face.png

With --skin the atlas is read from disk instead of the session server. An
unsupported atlas falls back to the default skin for --uuid (or the nil UUID),
exactly as the service would.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid
from pathlib import Path

from PIL import Image

from api.routes.faces import parse_scale
from domain.errors import FaceServiceError
from services.face_render import render_face, rescale
from services.face_service import FaceService, encode_png
from services.skin_resolver import DefaultSkins, SkinResolver

logger = logging.getLogger("render_face")


def _render_local(skin_path: Path, player_id: uuid.UUID, slim: bool, scale: int) -> bytes:
    resolver = SkinResolver(DefaultSkins.load())
    with Image.open(skin_path) as img:
        atlas = img.convert("RGBA")
    metadata = {"model": "slim"} if slim else {}
    skin = resolver.resolve(player_id, atlas, metadata)
    logger.info("using %s layout", skin.preset.value)
    face = render_face(skin)
    if scale > 0:
        face = rescale(face, scale)
    return encode_png(face).data


async def _render_remote(player_id: uuid.UUID, scale: int) -> bytes:
    service = FaceService.create()
    face = await service.get_face(player_id, scale)
    logger.info("fingerprint %s", face.fingerprint)
    return face.data


def main(argv: list[str] | None = None) -> int:
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Render a player face to PNG.")
    parser.add_argument("--uuid", type=uuid.UUID, default=None, help="Player UUID.")
    parser.add_argument("--skin", type=Path, default=None, help="Local skin atlas instead of the session server.")
    parser.add_argument("--slim", action="store_true", help="Treat --skin as a slim-arm skin.")
    parser.add_argument("--size", type=int, default=8, help="Output size in pixels (8..256, 8 * 2^n).")
    parser.add_argument("-o", "--output", type=Path, required=True)
    args = parser.parse_args(argv)

    if args.uuid is None and args.skin is None:
        parser.error("one of --uuid or --skin is required")

    scale = parse_scale(args.size)
    if scale is None:
        parser.error(f"invalid size {args.size}")

    player_id = args.uuid or uuid.UUID(int=0)
    try:
        if args.skin is not None:
            data = _render_local(args.skin, player_id, args.slim, scale)
        else:
            data = asyncio.run(_render_remote(player_id, scale))
    except FaceServiceError as exc:
        logger.error("render failed: %s", exc)
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(data)
    logger.info("wrote %s (%dx%d)", args.output, args.size, args.size)
    return 0


if __name__ == "__main__":
    sys.exit(main())
