import pytest
from PIL import Image

from domain.models import DefaultSkin
from scripts import render_face as script
from services.face_render import render_face
from services.skin_resolver import DefaultSkins


def test_renders_local_skin(tmp_path):
    skin_path = tmp_path / "skin.png"
    atlas = Image.new("RGBA", (64, 32), (0, 0, 0, 0))
    atlas.paste((250, 200, 10, 255), (8, 8, 16, 16))
    atlas.save(skin_path)
    out = tmp_path / "out" / "face.png"

    assert script.main(["--skin", str(skin_path), "--size", "64", "-o", str(out)]) == 0

    with Image.open(out) as face:
        assert face.size == (64, 64)
        assert face.convert("RGB").getpixel((63, 63)) == (250, 200, 10)


def test_unsupported_local_skin_uses_default(tmp_path):
    skin_path = tmp_path / "odd.png"
    Image.new("RGBA", (32, 32)).save(skin_path)
    out = tmp_path / "face.png"

    assert script.main(["--skin", str(skin_path), "--uuid", "00000000-0000-0000-0000-000000000001", "-o", str(out)]) == 0

    expected = render_face(DefaultSkins.load().get(DefaultSkin.ALEX))
    with Image.open(out) as face:
        assert face.convert("RGB").tobytes() == expected.tobytes()


def test_rejects_invalid_size(tmp_path):
    with pytest.raises(SystemExit):
        script.main(["--uuid", "00000000-0000-0000-0000-000000000001", "--size", "20", "-o", str(tmp_path / "x.png")])
