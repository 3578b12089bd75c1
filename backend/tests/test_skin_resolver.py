import uuid

import pytest
from PIL import Image

from domain.models import DefaultSkin, ModelFlag
from services.atlas_layout import LayoutPreset
from services.skin_resolver import (
    DefaultSkins,
    SkinResolver,
    default_skin_for,
    java_uuid_hash,
    resolve_preset,
    skin_from_texture,
)


@pytest.mark.parametrize(
    "model,size,expected",
    [
        (ModelFlag.WIDE, (64, 32), LayoutPreset.LEGACY),
        (ModelFlag.WIDE, (64, 64), LayoutPreset.WIDE_ARMS),
        (ModelFlag.SLIM, (64, 64), LayoutPreset.SLIM_ARMS),
        (ModelFlag.SLIM, (64, 32), None),
        (ModelFlag.WIDE, (100, 100), None),
        (ModelFlag.WIDE, (128, 128), None),
    ],
)
def test_resolve_preset_rules(model, size, expected):
    assert resolve_preset(model, size) is expected


def test_model_flag_from_metadata():
    assert ModelFlag.from_metadata({"model": "slim"}) is ModelFlag.SLIM
    assert ModelFlag.from_metadata({"model": "default"}) is ModelFlag.WIDE
    assert ModelFlag.from_metadata({}) is ModelFlag.WIDE
    assert ModelFlag.from_metadata(None) is ModelFlag.WIDE


def test_skin_from_texture_uses_metadata_model():
    img = Image.new("RGBA", (64, 64))
    assert skin_from_texture(img, {"model": "slim"}).preset is LayoutPreset.SLIM_ARMS
    assert skin_from_texture(img).preset is LayoutPreset.WIDE_ARMS
    assert skin_from_texture(Image.new("RGBA", (64, 32)), {"model": "slim"}) is None


def test_java_uuid_hash_matches_java():
    # java.util.UUID.fromString("069a79f4-44e9-4726-a5be-fca90e38aaf5").hashCode()
    player = uuid.UUID("069a79f4-44e9-4726-a5be-fca90e38aaf5")
    assert java_uuid_hash(player) == -369792882
    assert default_skin_for(player) is DefaultSkin.STEVE


def test_default_skin_selection_is_deterministic():
    player = uuid.UUID("853c80ef-3c37-49fd-aa49-938b674adae6")
    first = default_skin_for(player)
    assert all(default_skin_for(player) is first for _ in range(10))


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, DefaultSkin.STEVE),
        (1, DefaultSkin.ALEX),
        (1 << 32, DefaultSkin.ALEX),
        (1 << 64, DefaultSkin.ALEX),
        ((1 << 64) | 1, DefaultSkin.STEVE),
        ((1 << 96) | (1 << 64), DefaultSkin.STEVE),
    ],
)
def test_default_skin_follows_lowest_hash_bit(value, expected):
    assert default_skin_for(uuid.UUID(int=value)) is expected


def test_flipping_lowest_hash_bit_flips_selection():
    player = uuid.UUID("069a79f4-44e9-4726-a5be-fca90e38aaf5")
    flipped = uuid.UUID(int=player.int ^ 1)
    assert default_skin_for(player) is not default_skin_for(flipped)


def test_bundled_default_skins_load():
    defaults = DefaultSkins.load()
    steve = defaults.get(DefaultSkin.STEVE)
    alex = defaults.get(DefaultSkin.ALEX)
    assert steve.preset is LayoutPreset.WIDE_ARMS
    assert alex.preset is LayoutPreset.SLIM_ARMS
    assert steve.image.mode == "RGBA" and steve.image.size == (64, 64)
    assert defaults.for_player(uuid.UUID(int=1)) is alex


def test_default_skins_require_both(default_skins):
    with pytest.raises(ValueError, match="alex"):
        DefaultSkins({DefaultSkin.STEVE: default_skins.get(DefaultSkin.STEVE)})


def test_resolver_keeps_supported_skin(default_skins):
    resolver = SkinResolver(default_skins)
    img = Image.new("RGBA", (64, 32))
    skin = resolver.resolve(uuid.UUID(int=0), img)
    assert skin.image is img
    assert skin.preset is LayoutPreset.LEGACY


def test_resolver_falls_back_for_unsupported_or_missing_skin(default_skins):
    defaults = default_skins
    resolver = SkinResolver(defaults)
    player = uuid.UUID(int=1)

    skin = resolver.resolve(player, Image.new("RGBA", (100, 100)))
    assert skin is defaults.get(DefaultSkin.ALEX)

    assert resolver.resolve(uuid.UUID(int=0), None) is defaults.get(DefaultSkin.STEVE)
