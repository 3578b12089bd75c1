"""
Skin atlas layouts.

A skin is a flat texture atlas holding every face of the player model's
cuboids. Each body part is described by the atlas position of its unfolded
net and its physical size (width, height, depth); the six face regions are
derived from those with a fixed unfold:

        +------+------+
        | top  |bottom|
 +------+------+------+------+
 |right |front | back | left |
 +------+------+------+------+

Three layouts are supported: the 64x64 atlas with wide or slim arms and the
legacy 64x32 atlas, which has no overlay layers and reuses the right limbs
for the left side.
"""
from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple


@dataclass(frozen=True)
class Rect:
    """Axis-aligned region of the atlas, in pixels."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) as Pillow expects it."""
        return (self.x, self.y, self.right, self.bottom)

    def fits_within(self, width: int, height: int) -> bool:
        return self.x >= 0 and self.y >= 0 and self.right <= width and self.bottom <= height


@dataclass(frozen=True)
class CuboidRegions:
    front: Rect
    back: Rect
    top: Rect
    bottom: Rect
    left: Rect
    right: Rect

    @classmethod
    def unfold(cls, origin: Tuple[int, int], size: Tuple[int, int, int]) -> "CuboidRegions":
        ox, oy = origin
        w, h, d = size
        return cls(
            front=Rect(ox + d, oy + d, w, h),
            back=Rect(ox + d + w, oy + d, w, h),
            top=Rect(ox + d, oy, w, d),
            bottom=Rect(ox + d + w, oy, w, d),
            left=Rect(ox + d + 2 * w, oy + d, d, h),
            right=Rect(ox, oy + d, d, h),
        )

    def faces(self) -> Iterator[Tuple[str, Rect]]:
        for f in fields(self):
            yield f.name, getattr(self, f.name)


def _cuboid(origin: Tuple[int, int], size: Tuple[int, int, int]) -> CuboidRegions:
    return CuboidRegions.unfold(origin, size)


@dataclass(frozen=True)
class AtlasLayout:
    """Regions for every modeled body part. Overlay parts are optional."""
    width: int
    height: int
    head: CuboidRegions
    hat: CuboidRegions
    body: CuboidRegions
    right_leg: CuboidRegions
    left_leg: CuboidRegions
    right_arm: CuboidRegions
    left_arm: CuboidRegions
    jacket: Optional[CuboidRegions] = None
    right_pants: Optional[CuboidRegions] = None
    left_pants: Optional[CuboidRegions] = None
    right_sleeve: Optional[CuboidRegions] = None
    left_sleeve: Optional[CuboidRegions] = None

    def parts(self) -> Iterator[Tuple[str, CuboidRegions]]:
        """Yield every present part, skipping missing overlays."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, CuboidRegions):
                yield f.name, value

    def validate(self) -> None:
        """Raise ValueError if any region spills outside the atlas."""
        for part, regions in self.parts():
            for face, rect in regions.faces():
                if not rect.fits_within(self.width, self.height):
                    raise ValueError(
                        f"{part}.{face} region {rect} exceeds {self.width}x{self.height} atlas"
                    )


def _modern_layout(arm_width: int) -> AtlasLayout:
    arm = (arm_width, 12, 4)
    limb = (4, 12, 4)
    return AtlasLayout(
        width=64,
        height=64,
        head=_cuboid((0, 0), (8, 8, 8)),
        hat=_cuboid((32, 0), (8, 8, 8)),
        body=_cuboid((16, 16), (8, 12, 4)),
        jacket=_cuboid((16, 32), (8, 12, 4)),
        right_leg=_cuboid((0, 16), limb),
        right_pants=_cuboid((0, 32), limb),
        left_leg=_cuboid((16, 48), limb),
        left_pants=_cuboid((0, 48), limb),
        right_arm=_cuboid((40, 16), arm),
        right_sleeve=_cuboid((40, 32), arm),
        left_arm=_cuboid((32, 48), arm),
        left_sleeve=_cuboid((48, 48), arm),
    )


def _legacy_layout() -> AtlasLayout:
    limb = (4, 12, 4)
    # Left limbs share the right limbs' texture; whether they should be
    # mirrored is only relevant for full-body rendering.
    return AtlasLayout(
        width=64,
        height=32,
        head=_cuboid((0, 0), (8, 8, 8)),
        hat=_cuboid((32, 0), (8, 8, 8)),
        body=_cuboid((16, 16), (8, 12, 4)),
        right_leg=_cuboid((0, 16), limb),
        left_leg=_cuboid((0, 16), limb),
        right_arm=_cuboid((40, 16), limb),
        left_arm=_cuboid((40, 16), limb),
    )


class LayoutPreset(str, Enum):
    WIDE_ARMS = "wide_arms"
    SLIM_ARMS = "slim_arms"
    LEGACY = "legacy"

    @property
    def layout(self) -> AtlasLayout:
        return _LAYOUTS[self]


_LAYOUTS: Dict[LayoutPreset, AtlasLayout] = {
    LayoutPreset.WIDE_ARMS: _modern_layout(arm_width=4),
    LayoutPreset.SLIM_ARMS: _modern_layout(arm_width=3),
    LayoutPreset.LEGACY: _legacy_layout(),
}

for _layout in _LAYOUTS.values():
    _layout.validate()
