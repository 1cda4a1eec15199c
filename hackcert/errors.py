"""Errors raised by the certificate render pipeline."""

from __future__ import annotations


class CertificateRenderError(RuntimeError):
    """Base class for failures while producing a certificate."""


class RenderSurfaceMissing(CertificateRenderError):
    """Raised when the composed document is not mounted on the render surface."""


class ImageLoadTimeout(CertificateRenderError):
    """An embedded image did not settle in time. Logged, never raised."""

    def __init__(self, src: str, timeout: float):
        self.src = src
        self.timeout = timeout
        super().__init__(f"image {src!r} did not load within {timeout:g}s")


class RasterizationFailure(CertificateRenderError):
    """Raised when capturing the document into pixels fails."""


class BlankOutputDetected(CertificateRenderError):
    """The captured raster is entirely white. Logged, never raised."""

    def __init__(self, width: int, height: int, content_length: int):
        self.width = width
        self.height = height
        self.content_length = content_length
        super().__init__(
            f"blank raster {width}x{height} for {content_length} chars of content"
        )
