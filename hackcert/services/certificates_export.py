"""Certificate export pipeline.

compose -> mount -> readiness barrier -> rasterize -> blank check -> PDF.
The render surface is released on every path before an error reaches the
caller; retries are full re-runs.
"""

from __future__ import annotations

import asyncio
import base64
import dataclasses
import hashlib
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from ..errors import CertificateRenderError, RenderSurfaceMissing
from ..models import CertificateData, RenderedDocument, RenderSettings
from ..shared.certificates import compose_document
from ..shared.certificates_layout import CertificateDocument
from ..shared.names import certificate_filename
from .pdf_export import serialize_pdf
from .rasterizer import rasterize
from .readiness import wait_until_ready
from .render_host import RenderHost, RenderSurface
from .verifier import verify_raster

logger = logging.getLogger("hackcert.render")

_CACHE_TTL_SECONDS = 45
_CACHE_MAX_ENTRIES = 64


@dataclass(frozen=True)
class PreviewResult:
    image_base64: str
    warnings: tuple[str, ...]


_preview_cache: dict[str, tuple[float, PreviewResult]] = {}


def _store_preview(cache_key: str, now: float, result: PreviewResult) -> None:
    expired = [
        key
        for key, (stamp, _) in _preview_cache.items()
        if now - stamp >= _CACHE_TTL_SECONDS
    ]
    for key in expired:
        del _preview_cache[key]
    _preview_cache[cache_key] = (now, result)
    while len(_preview_cache) > _CACHE_MAX_ENTRIES:
        del _preview_cache[next(iter(_preview_cache))]


def _mount(
    surface: RenderSurface,
    data: CertificateData,
    host: RenderHost,
    settings: RenderSettings,
    now: datetime | None,
) -> CertificateDocument:
    document = compose_document(data, brand=settings.brand, now=now)
    surface.mount(document, host.image_loader)
    if surface.document is None:
        raise RenderSurfaceMissing(
            f"document for {data.hackathon_title!r} did not mount on surface "
            f"{surface.surface_id}"
        )
    return document


async def generate_certificate(
    data: CertificateData,
    *,
    host: RenderHost,
    settings: RenderSettings | None = None,
    now: datetime | None = None,
) -> RenderedDocument:
    settings = settings or host.settings
    started = time.monotonic()
    try:
        async with host.acquire_surface() as surface:
            document = _mount(surface, data, host, settings, now)
            report = await wait_until_ready(surface, host, settings)
            image = await rasterize(surface, host, settings)
            check = verify_raster(image, len(document.text_content()))
            pdf_bytes = serialize_pdf(
                image,
                title=f"{settings.brand} Certificate - {document.honoree}",
                author=settings.brand,
                subject=data.hackathon_title,
            )
    except CertificateRenderError as exc:
        logger.error(
            "[CERT-FAIL] template=%s title=%r error=%s",
            data.template_style.value,
            data.hackathon_title,
            exc,
        )
        raise
    filename = certificate_filename(
        settings.brand, data.hackathon_title, document.honoree
    )
    logger.info(
        "[CERT-RENDER] template=%s code=%s file=%s blank=%s failed_images=%d elapsed_ms=%d",
        document.template.value,
        document.certificate_code,
        filename,
        check.blank,
        len(report.failed_images),
        int((time.monotonic() - started) * 1000),
    )
    return RenderedDocument(
        pdf=pdf_bytes,
        filename=filename,
        certificate_code=document.certificate_code,
        template=document.template,
        blank=check.blank,
    )


def render_certificate_pdf(
    data: CertificateData,
    *,
    host: RenderHost,
    settings: RenderSettings | None = None,
    now: datetime | None = None,
) -> RenderedDocument:
    """Synchronous entry point, bounded by ``settings.render_deadline``."""
    settings = settings or host.settings
    try:
        return host.run(
            generate_certificate(data, host=host, settings=settings, now=now),
            timeout=settings.render_deadline,
        )
    except asyncio.TimeoutError as exc:
        logger.error(
            "[CERT-FAIL] deadline=%.1fs exceeded title=%r",
            settings.render_deadline,
            data.hackathon_title,
        )
        raise CertificateRenderError(
            f"certificate render exceeded {settings.render_deadline:g}s"
        ) from exc


def _build_cache_key(data: CertificateData, settings: RenderSettings) -> str:
    raw = json.dumps(
        {"data": dataclasses.asdict(data), "settings": dataclasses.asdict(settings)},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(raw.encode()).hexdigest()


async def generate_preview(
    data: CertificateData,
    *,
    host: RenderHost,
    settings: RenderSettings | None = None,
) -> PreviewResult:
    """PNG preview for template pickers; skips the blank scan and the PDF."""
    settings = settings or host.settings
    cache_key = _build_cache_key(data, settings)
    cached = _preview_cache.get(cache_key)
    now = time.time()
    if cached and now - cached[0] < _CACHE_TTL_SECONDS:
        return cached[1]

    async with host.acquire_surface() as surface:
        _mount(surface, data, host, settings, None)
        report = await wait_until_ready(surface, host, settings)
        image = await rasterize(surface, host, settings)

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    warnings = list(report.warnings)
    warnings.extend(host.fonts.warnings)
    result = PreviewResult(
        image_base64=base64.b64encode(buffer.getvalue()).decode("ascii"),
        warnings=tuple(warnings),
    )
    _store_preview(cache_key, now, result)
    return result


def render_preview(
    data: CertificateData,
    *,
    host: RenderHost,
    settings: RenderSettings | None = None,
) -> PreviewResult:
    settings = settings or host.settings
    return host.run(
        generate_preview(data, host=host, settings=settings),
        timeout=settings.render_deadline,
    )
