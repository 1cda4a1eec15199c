"""Shared off-screen rendering context.

A ``RenderHost`` owns the surfaces certificates are mounted on, the font
book, and the image loader. Surfaces are only handed out through
``acquire_surface``, which holds the host's render lock for the whole
invocation, so two certificates never share the context mid-capture.
A host serves one event loop at a time; synchronous callers go through
``RenderHost.run`` which uses the host's own loop thread.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import os
import sys
import threading
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, TypeVar
from urllib.parse import unquote_to_bytes, urlparse
from urllib.request import url2pathname

import httpx
from PIL import Image, ImageFont

from ..models import RenderSettings
from ..shared.certificates_layout import (
    SAFE_FALLBACK_FONT,
    CertificateDocument,
    ImageSlot,
)

logger = logging.getLogger("hackcert.render")
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

T = TypeVar("T")

_FONT_FILES = {
    "Helvetica": "DejaVuSans.ttf",
    "Helvetica-Bold": "DejaVuSans-Bold.ttf",
    "Helvetica-Oblique": "DejaVuSans-Oblique.ttf",
    "Helvetica-BoldOblique": "DejaVuSans-BoldOblique.ttf",
    "Times-Roman": "DejaVuSerif.ttf",
    "Times-Bold": "DejaVuSerif-Bold.ttf",
    "Times-Italic": "DejaVuSerif-Italic.ttf",
    "Times-BoldItalic": "DejaVuSerif-BoldItalic.ttf",
    "Courier": "DejaVuSansMono.ttf",
    "Courier-Bold": "DejaVuSansMono-Bold.ttf",
}

OFFSCREEN_STYLE = {
    "position": "fixed",
    "left": -10000.0,
    "top": 0.0,
}


class FontBook:
    """TrueType data for the font codes used by templates.

    ``load`` reads every font file once; ``font`` builds sized faces from the
    cached bytes and falls back to Pillow's bundled face when no file exists.
    """

    def __init__(self, font_dir: str):
        self.font_dir = font_dir
        self.loaded = False
        self.warnings: list[str] = []
        self._data: dict[str, bytes] = {}
        self._faces: dict[tuple[str, int], Any] = {}

    def load(self) -> None:
        for code, filename in _FONT_FILES.items():
            path = os.path.join(self.font_dir, filename)
            try:
                self._data[code] = Path(path).read_bytes()
            except OSError:
                self.warnings.append(f"[font-fallback] {code} unavailable at {path}")
        if self.warnings:
            logger.warning(
                "[CERT-FONT] dir=%s missing=%d", self.font_dir, len(self.warnings)
            )
        self.loaded = True

    def font(self, code: str, size_px: int):
        size_px = max(int(size_px), 1)
        key = (code, size_px)
        face = self._faces.get(key)
        if face is None:
            data = self._data.get(code) or self._data.get(SAFE_FALLBACK_FONT)
            if data:
                face = ImageFont.truetype(BytesIO(data), size_px)
            else:
                face = ImageFont.load_default(size=size_px)
            self._faces[key] = face
        return face


class ImageLoader:
    """Fetches and decodes image sub-resources.

    ``data:`` and ``http(s)`` sources are always accepted. Local paths and
    ``file://`` URIs are read only when ``allow_local`` is set, which the CLI
    does and the web app does not.
    """

    def __init__(self, http_timeout: float = 10.0, *, allow_local: bool = False):
        self.http_timeout = http_timeout
        self.allow_local = allow_local

    async def fetch(self, src: str) -> bytes:
        if src.startswith("data:"):
            header, _, payload = src.partition(",")
            if header.endswith(";base64"):
                return base64.b64decode(payload)
            return unquote_to_bytes(payload)
        parsed = urlparse(src)
        if parsed.scheme in ("http", "https"):
            async with httpx.AsyncClient(
                timeout=self.http_timeout, follow_redirects=True
            ) as client:
                response = await client.get(src)
                response.raise_for_status()
                return response.content
        if parsed.scheme == "file":
            path = url2pathname(parsed.path)
        elif parsed.scheme in ("", None) or len(parsed.scheme) == 1:
            path = src
        else:
            raise ValueError(f"Unsupported image source: {src!r}")
        if not self.allow_local:
            raise ValueError(f"Local image sources are disabled: {src!r}")
        return await asyncio.to_thread(Path(path).read_bytes)

    async def load(self, src: str) -> Image.Image:
        data = await self.fetch(src)
        return await asyncio.to_thread(_decode_image, data)


def _decode_image(data: bytes) -> Image.Image:
    with Image.open(BytesIO(data)) as img:
        img.load()
        return img.convert("RGBA")


@dataclass
class RenderSurface:
    surface_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    style: dict = field(default_factory=lambda: dict(OFFSCREEN_STYLE))
    document: CertificateDocument | None = None
    loads: list[tuple[ImageSlot, asyncio.Task]] = field(default_factory=list)

    def mount(self, document: CertificateDocument | None, loader: ImageLoader) -> None:
        """Attach ``document`` and start loading its images in the background."""
        if document is None or document.root is None:
            return
        document.root.style.position = self.style["position"]
        document.root.style.offset = (self.style["left"], self.style["top"])
        self.document = document
        for slot in document.images():
            if not slot.src:
                continue
            slot.state = "pending"
            self.loads.append((slot, asyncio.ensure_future(loader.load(slot.src))))

    def detach(self) -> None:
        for _, task in self.loads:
            if not task.done():
                task.cancel()
        self.loads.clear()
        self.document = None


class RenderHost:
    def __init__(
        self,
        settings: RenderSettings | None = None,
        *,
        image_loader: ImageLoader | None = None,
        fonts: FontBook | None = None,
    ):
        self.settings = settings or RenderSettings()
        self.image_loader = image_loader or ImageLoader()
        self.fonts = fonts or FontBook(self.settings.font_dir)
        self.surfaces: list[RenderSurface] = []
        self._bound_loop: asyncio.AbstractEventLoop | None = None
        self._render_lock: asyncio.Lock | None = None
        self._fonts_future: asyncio.Future | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._thread_lock = threading.Lock()

    def _bind(self) -> None:
        loop = asyncio.get_running_loop()
        if loop is not self._bound_loop:
            self._bound_loop = loop
            self._render_lock = asyncio.Lock()
            self._fonts_future = None

    async def fonts_ready(self) -> None:
        """Resolve once the font book has been read."""
        if self.fonts.loaded:
            return
        self._bind()
        if self._fonts_future is None:
            self._fonts_future = asyncio.ensure_future(asyncio.to_thread(self.fonts.load))
        await asyncio.shield(self._fonts_future)

    @asynccontextmanager
    async def acquire_surface(self) -> AsyncIterator[RenderSurface]:
        self._bind()
        async with self._render_lock:
            surface = RenderSurface()
            self.surfaces.append(surface)
            logger.info("[CERT-SURFACE] attached id=%s", surface.surface_id)
            try:
                yield surface
            finally:
                surface.detach()
                if surface in self.surfaces:
                    self.surfaces.remove(surface)
                logger.info(
                    "[CERT-SURFACE] detached id=%s remaining=%d",
                    surface.surface_id,
                    len(self.surfaces),
                )

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._thread_lock:
            if self._loop is None or self._loop.is_closed():
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="hackcert-render", daemon=True
                )
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    def run(self, coro: Awaitable[T], timeout: float | None = None) -> T:
        """Run ``coro`` on the host loop from synchronous code."""
        if timeout is not None:
            coro = asyncio.wait_for(coro, timeout)
        future = asyncio.run_coroutine_threadsafe(coro, self._ensure_loop())
        return future.result()

    def close(self) -> None:
        with self._thread_lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=5)
        loop.close()
