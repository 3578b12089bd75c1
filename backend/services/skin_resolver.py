"""
Skin resolution.

Pairs a downloaded atlas with the layout it was painted for and supplies a
built-in default atlas whenever a player has no usable skin.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from PIL import Image

from domain.models import DefaultSkin, ModelFlag
from services.atlas_layout import AtlasLayout, LayoutPreset

logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).resolve().parent / "assets"
DEFAULT_SKIN_FILES: Dict[DefaultSkin, Tuple[str, LayoutPreset]] = {
    DefaultSkin.STEVE: ("steve.png", LayoutPreset.WIDE_ARMS),
    DefaultSkin.ALEX: ("alex.png", LayoutPreset.SLIM_ARMS),
}

# First match wins; anything missing here is unsupported.
_PRESET_RULES: Dict[Tuple[ModelFlag, Tuple[int, int]], LayoutPreset] = {
    (ModelFlag.WIDE, (64, 32)): LayoutPreset.LEGACY,
    (ModelFlag.WIDE, (64, 64)): LayoutPreset.WIDE_ARMS,
    (ModelFlag.SLIM, (64, 64)): LayoutPreset.SLIM_ARMS,
}

_MASK_64 = (1 << 64) - 1
_MASK_32 = (1 << 32) - 1


@dataclass(frozen=True)
class Skin:
    """An RGBA atlas and its layout. The image is never mutated once built."""
    image: Image.Image
    preset: LayoutPreset

    @property
    def layout(self) -> AtlasLayout:
        return self.preset.layout


def resolve_preset(model: ModelFlag, size: Tuple[int, int]) -> Optional[LayoutPreset]:
    return _PRESET_RULES.get((model, tuple(size)))


def skin_from_texture(image: Image.Image, metadata: Optional[Mapping[str, str]] = None) -> Optional[Skin]:
    """Build a Skin from a fetched atlas, or None when its shape is unsupported."""
    model = ModelFlag.from_metadata(metadata)
    preset = resolve_preset(model, image.size)
    if preset is None:
        return None
    return Skin(image=image, preset=preset)


def java_uuid_hash(player_id: uuid.UUID) -> int:
    """
    Reproduce java.util.UUID#hashCode as a signed 32-bit int.

    Clients pick the default skin from this value, so it has to match bit
    for bit.
    """
    value = player_id.int
    hilo = ((value >> 64) & _MASK_64) ^ (value & _MASK_64)
    hashed = ((hilo >> 32) ^ hilo) & _MASK_32
    if hashed & 0x80000000:
        hashed -= 1 << 32
    return hashed


def default_skin_for(player_id: uuid.UUID) -> DefaultSkin:
    if java_uuid_hash(player_id) & 1 == 0:
        return DefaultSkin.STEVE
    return DefaultSkin.ALEX


def load_skin_file(path: Path, preset: LayoutPreset) -> Skin:
    with Image.open(path) as img:
        img.load()
        if img.mode != "RGBA":
            raise ValueError(f"default skin {path} is {img.mode}, expected RGBA")
        if img.size != (preset.layout.width, preset.layout.height):
            raise ValueError(f"default skin {path} is {img.size}, expected {preset.value} dimensions")
        return Skin(image=img.copy(), preset=preset)


class DefaultSkins:
    """The built-in atlases, loaded once and shared read-only."""

    def __init__(self, skins: Mapping[DefaultSkin, Skin]):
        missing = set(DefaultSkin) - set(skins)
        if missing:
            raise ValueError(f"missing default skins: {sorted(s.value for s in missing)}")
        self._skins: Dict[DefaultSkin, Skin] = dict(skins)

    @classmethod
    def load(cls, assets_dir: Path = ASSETS_DIR) -> "DefaultSkins":
        skins = {
            kind: load_skin_file(assets_dir / filename, preset)
            for kind, (filename, preset) in DEFAULT_SKIN_FILES.items()
        }
        return cls(skins)

    def get(self, kind: DefaultSkin) -> Skin:
        return self._skins[kind]

    def for_player(self, player_id: uuid.UUID) -> Skin:
        return self._skins[default_skin_for(player_id)]


class SkinResolver:
    def __init__(self, defaults: DefaultSkins):
        self.defaults = defaults

    def resolve(
        self,
        player_id: uuid.UUID,
        image: Optional[Image.Image],
        metadata: Optional[Mapping[str, str]] = None,
    ) -> Skin:
        """Use the player's atlas when supported, otherwise their default skin."""
        if image is not None:
            skin = skin_from_texture(image, metadata)
            if skin is not None:
                return skin
            logger.info(
                "unsupported skin for %s (%dx%d, model=%s); using default",
                player_id,
                image.width,
                image.height,
                ModelFlag.from_metadata(metadata).value,
            )
        logger.debug("using default skin for %s", player_id)
        return self.defaults.for_player(player_id)
