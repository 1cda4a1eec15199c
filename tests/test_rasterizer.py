import asyncio

import pytest

from hackcert.errors import RasterizationFailure, RenderSurfaceMissing
from hackcert.services import rasterizer
from hackcert.services.rasterizer import capture, prepare_for_capture, rasterize
from hackcert.services.render_host import RenderSurface
from hackcert.services.verifier import is_blank
from hackcert.shared.certificates import compose_document


@pytest.mark.smoke
def test_capture_is_oversampled(certificate, fonts):
    image = capture(compose_document(certificate), fonts, 2.0)
    assert image.size == (2244, 1588)
    assert image.mode == "RGB"
    assert not is_blank(image)


def test_prepare_forces_visible_static_root(certificate):
    document = compose_document(certificate)
    document.root.style.visible = False
    document.root.style.opacity = 0.0
    document.root.style.position = "fixed"
    document.root.style.offset = (-10000.0, 0.0)

    prepared = prepare_for_capture(document)

    assert all(node.style.visible for node in prepared.nodes())
    assert all(node.style.opacity == 1.0 for node in prepared.nodes())
    assert prepared.root.style.position == "static"
    assert prepared.root.style.offset == (0.0, 0.0)
    # the mounted document is left untouched
    assert document.root.style.visible is False
    assert document.root.style.offset == (-10000.0, 0.0)


def test_hidden_document_still_captures(certificate, fonts):
    document = compose_document(certificate)
    document.root.style.opacity = 0.0
    document.root.style.offset = (-10000.0, 0.0)
    assert is_blank(capture(document, fonts, 1.0, prepare=False))
    assert not is_blank(capture(document, fonts, 1.0))


def test_rasterize_without_document(host, fast_settings):
    with pytest.raises(RenderSurfaceMissing):
        asyncio.run(rasterize(RenderSurface(), host, fast_settings))


def test_rasterize_wraps_capture_errors(monkeypatch, host, fast_settings, certificate):
    def broken(*args, **kwargs):
        raise MemoryError("canvas too large")

    monkeypatch.setattr(rasterizer, "capture", broken)
    surface = RenderSurface(document=compose_document(certificate))
    with pytest.raises(RasterizationFailure) as excinfo:
        asyncio.run(rasterize(surface, host, fast_settings))
    assert isinstance(excinfo.value.__cause__, MemoryError)
