import sys
from pathlib import Path

import pytest

# Put backend/ on sys.path so api, services and settings import without installing
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(scope="session")
def default_skins():
    """The bundled default atlases, loaded once for the whole run."""
    from services.skin_resolver import DefaultSkins

    return DefaultSkins.load()
