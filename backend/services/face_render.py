"""
Face rendering using Pillow.

Cuts the front of the head and of the hat layer out of a skin atlas,
composites the hat over the head and drops the alpha channel. Upscaling is
nearest-neighbour by powers of two so the pixel-art stays crisp.
"""
from PIL import Image

from domain.errors import RegionBoundsError
from services.atlas_layout import Rect
from services.skin_resolver import Skin


def region(atlas: Image.Image, rect: Rect) -> Image.Image:
    """Crop a layout region, refusing to read past the atlas edge."""
    if not rect.fits_within(atlas.width, atlas.height):
        # Pillow would silently pad the crop with transparent pixels.
        raise RegionBoundsError(
            f"region {rect} is out of bounds for {atlas.width}x{atlas.height} atlas"
        )
    return atlas.crop(rect.box())


def render_face(skin: Skin) -> Image.Image:
    """Return the opaque RGB face (8x8 for every supported layout)."""
    layout = skin.layout
    atlas = skin.image if skin.image.mode == "RGBA" else skin.image.convert("RGBA")

    face = region(atlas, layout.head.front)
    hat = region(atlas, layout.hat.front)
    if hat.size != face.size:
        raise RegionBoundsError(f"hat front {hat.size} does not cover head front {face.size}")

    return Image.alpha_composite(face, hat).convert("RGB")


def rescale(image: Image.Image, scale: int) -> Image.Image:
    """Blow up by 2**scale; output pixel (x, y) copies input (x >> scale, y >> scale)."""
    if scale < 0:
        raise ValueError(f"scale exponent must be non-negative, got {scale}")
    if scale == 0:
        return image.copy()
    width, height = image.size
    return image.resize((width << scale, height << scale), resample=Image.Resampling.NEAREST)
