import asyncio
import pathlib
import sys

import pytest
from PIL import Image

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hackcert.app import create_app
from hackcert.models import CertificateData, RenderSettings
from hackcert.services.render_host import FontBook, RenderHost

FAST_CONFIG = {
    "CERT_RASTER_SCALE": 1.0,
    "CERT_IMAGE_TIMEOUT": 0.2,
    "CERT_FONT_TIMEOUT": 2.0,
    "CERT_SETTLE_DELAY": 0,
    "CERT_RENDER_DEADLINE": 20,
}


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "slow" in item.keywords or "quarantine" in item.keywords:
            continue
        item.add_marker("full")
        if "no_smoke" in item.keywords:
            continue
        item.add_marker("smoke")


class FakeImageLoader:
    """Serves images from memory; ``hang`` sources never resolve."""

    def __init__(self, hang=(), fail=()):
        self.hang = set(hang)
        self.fail = set(fail)
        self.requested = []

    async def load(self, src):
        self.requested.append(src)
        if src in self.hang:
            await asyncio.Event().wait()
        if src in self.fail:
            raise OSError(f"cannot open {src}")
        return Image.new("RGBA", (64, 64), "#c0392b")


@pytest.fixture
def fast_settings(tmp_path):
    return RenderSettings.from_mapping({**FAST_CONFIG, "CERT_FONT_DIR": str(tmp_path)})


@pytest.fixture
def image_loader():
    return FakeImageLoader()


@pytest.fixture
def host(fast_settings, image_loader):
    render_host = RenderHost(fast_settings, image_loader=image_loader)
    yield render_host
    render_host.close()


@pytest.fixture
def fonts(tmp_path):
    return FontBook(str(tmp_path))


@pytest.fixture
def certificate():
    return CertificateData(
        participant_name="Jane Doe",
        hackathon_title="Spring Hack 2025",
        company="Acme Robotics",
        rank=1,
        date="January 5, 2024",
    )


@pytest.fixture
def app(tmp_path):
    application = create_app({**FAST_CONFIG, "CERT_FONT_DIR": str(tmp_path)})
    yield application
    application.extensions["render_host"].close()


@pytest.fixture
def client(app):
    return app.test_client()
