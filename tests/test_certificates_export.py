import asyncio
import base64
import dataclasses
import re
import time
from io import BytesIO

import pytest
from PIL import Image
from PyPDF2 import PdfReader

from conftest import FakeImageLoader
from hackcert.errors import (
    CertificateRenderError,
    RasterizationFailure,
    RenderSurfaceMissing,
)
from hackcert.models import TemplateStyle
from hackcert.services import certificates_export, rasterizer
from hackcert.services.certificates_export import (
    PreviewResult,
    generate_certificate,
    generate_preview,
    render_certificate_pdf,
)
from hackcert.services.render_host import RenderHost
from hackcert.shared.certificates_layout import CertificateDocument

CODE_RE = re.compile(r"^\d{2}/\d{2}/\d{4}-\d{6}$")
SLOW_LOGO = "https://slow.example/logo.png"


@pytest.mark.smoke
def test_generate_certificate(host, certificate):
    result = asyncio.run(generate_certificate(certificate, host=host))
    assert result.filename == "Saarthix_Spring_Hack_2025_Jane_Doe_Certificate.pdf"
    assert CODE_RE.match(result.certificate_code)
    assert result.template is TemplateStyle.TEMPLATE1
    assert result.blank is False
    reader = PdfReader(BytesIO(result.pdf))
    assert len(reader.pages) == 1
    assert float(reader.pages[0].mediabox.width) > float(reader.pages[0].mediabox.height)
    assert host.surfaces == []


def test_supplied_code_is_kept(host, certificate):
    data = dataclasses.replace(certificate, certificate_code="05/01/2024-123456")
    result = asyncio.run(generate_certificate(data, host=host))
    assert result.certificate_code == "05/01/2024-123456"


def test_brand_comes_from_settings(host, certificate, fast_settings):
    settings = dataclasses.replace(fast_settings, brand="Hackverse")
    result = asyncio.run(generate_certificate(certificate, host=host, settings=settings))
    assert result.filename.startswith("Hackverse_Spring_Hack_2025_")


def test_never_loading_logo_still_renders(fast_settings, certificate):
    host = RenderHost(fast_settings, image_loader=FakeImageLoader(hang={SLOW_LOGO}))
    data = dataclasses.replace(certificate, logo_url=SLOW_LOGO)
    result = asyncio.run(generate_certificate(data, host=host))
    assert result.pdf.startswith(b"%PDF")
    assert host.surfaces == []


def test_rasterization_failure_after_teardown(monkeypatch, host, certificate):
    seen = []

    def broken(*args, **kwargs):
        seen.append(len(host.surfaces))
        raise ValueError("bad canvas")

    monkeypatch.setattr(rasterizer, "capture", broken)
    with pytest.raises(RasterizationFailure) as excinfo:
        asyncio.run(generate_certificate(certificate, host=host))
    assert isinstance(excinfo.value.__cause__, ValueError)
    assert seen == [1]
    assert host.surfaces == []


def test_unmounted_document_raises(monkeypatch, host, certificate):
    def empty_document(*args, **kwargs):
        return CertificateDocument(
            root=None,
            template=TemplateStyle.TEMPLATE1,
            honoree="Jane Doe",
            achievement_text="",
            certificate_code="01/01/2024-000000",
        )

    monkeypatch.setattr(certificates_export, "compose_document", empty_document)
    with pytest.raises(RenderSurfaceMissing):
        asyncio.run(generate_certificate(certificate, host=host))
    assert host.surfaces == []


def test_invocations_are_serialized(monkeypatch, host, certificate):
    real_capture = rasterizer.capture
    seen = []

    def spy(document, fonts, scale=2.0, **kwargs):
        seen.append(len(host.surfaces))
        return real_capture(document, fonts, scale, **kwargs)

    monkeypatch.setattr(rasterizer, "capture", spy)
    other = dataclasses.replace(
        certificate, participant_name="John Roe", template_style=TemplateStyle.TEMPLATE3
    )

    async def both():
        return await asyncio.gather(
            generate_certificate(certificate, host=host),
            generate_certificate(other, host=host),
        )

    first, second = asyncio.run(both())
    assert seen == [1, 1]
    assert first.filename.endswith("_Jane_Doe_Certificate.pdf")
    assert second.filename.endswith("_John_Roe_Certificate.pdf")
    assert host.surfaces == []


def test_blank_capture_is_advisory(monkeypatch, host, certificate):
    monkeypatch.setattr(
        rasterizer, "capture", lambda *a, **k: Image.new("RGB", (200, 140), "white")
    )
    result = asyncio.run(generate_certificate(certificate, host=host))
    assert result.blank is True
    assert result.pdf.startswith(b"%PDF")


def test_sync_render(host, certificate):
    result = render_certificate_pdf(certificate, host=host)
    assert result.pdf.startswith(b"%PDF")
    assert host.surfaces == []


def test_sync_render_deadline(fast_settings, certificate):
    settings = dataclasses.replace(fast_settings, render_deadline=0.3, image_timeout=5)
    host = RenderHost(settings, image_loader=FakeImageLoader(hang={SLOW_LOGO}))
    data = dataclasses.replace(certificate, logo_url=SLOW_LOGO)
    try:
        with pytest.raises(CertificateRenderError, match="exceeded"):
            render_certificate_pdf(data, host=host)
        assert host.surfaces == []
    finally:
        host.close()


def test_preview_is_cached(monkeypatch, host, certificate, image_loader):
    monkeypatch.setattr(certificates_export, "_preview_cache", {})
    data = dataclasses.replace(certificate, platform_logo_url="https://cdn.example/p.png")

    first = asyncio.run(generate_preview(data, host=host))
    second = asyncio.run(generate_preview(data, host=host))

    assert first is second
    assert image_loader.requested == ["https://cdn.example/p.png"]
    png = Image.open(BytesIO(base64.b64decode(first.image_base64)))
    assert png.size == (1122, 794)


def test_preview_reports_image_fallbacks(monkeypatch, fast_settings, certificate):
    monkeypatch.setattr(certificates_export, "_preview_cache", {})
    host = RenderHost(fast_settings, image_loader=FakeImageLoader(hang={SLOW_LOGO}))
    data = dataclasses.replace(certificate, logo_url=SLOW_LOGO)
    result = asyncio.run(generate_preview(data, host=host))
    assert any(w.startswith("[image-fallback]") for w in result.warnings)
    assert any(w.startswith("[font-fallback]") for w in result.warnings)


def test_expired_previews_are_evicted(monkeypatch, host, certificate):
    stale = PreviewResult(image_base64="", warnings=())
    cache = {
        "stale": (time.time() - certificates_export._CACHE_TTL_SECONDS - 1, stale),
    }
    monkeypatch.setattr(certificates_export, "_preview_cache", cache)

    asyncio.run(generate_preview(certificate, host=host))

    assert "stale" not in cache
    assert len(cache) == 1


def test_preview_cache_is_capped(monkeypatch):
    cache = {}
    monkeypatch.setattr(certificates_export, "_preview_cache", cache)
    monkeypatch.setattr(certificates_export, "_CACHE_MAX_ENTRIES", 3)
    result = PreviewResult(image_base64="", warnings=())
    now = time.time()
    for index in range(5):
        certificates_export._store_preview(f"key{index}", now, result)
    assert list(cache) == ["key2", "key3", "key4"]
