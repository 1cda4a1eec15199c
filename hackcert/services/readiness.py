"""Readiness barrier run between mounting a certificate and capturing it.

Order matters: fonts first, then every mounted image, then a settling delay.
Each step is bounded, so the whole barrier finishes within
``font_timeout + image_timeout + settle_delay`` even if an image never loads.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ..errors import ImageLoadTimeout
from ..models import RenderSettings
from ..shared.certificates_layout import ImageSlot
from .render_host import RenderHost, RenderSurface

logger = logging.getLogger("hackcert.render")


@dataclass
class ReadinessReport:
    fonts_loaded: bool = True
    failed_images: list[str] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        messages = []
        if not self.fonts_loaded:
            messages.append("[font-fallback] fonts were not ready; using default faces")
        messages.extend(
            f"[image-fallback] {_short(src)} could not be loaded"
            for src in self.failed_images
        )
        return messages


def _short(src: str, limit: int = 80) -> str:
    return src if len(src) <= limit else src[: limit - 3] + "..."


async def wait_for_fonts(host: RenderHost, timeout: float) -> bool:
    try:
        await asyncio.wait_for(host.fonts_ready(), timeout)
    except asyncio.TimeoutError:
        logger.warning("[CERT-FONT] not ready after %.1fs; using fallback faces", timeout)
        return False
    return True


async def _settle_image(slot: ImageSlot, task: asyncio.Task, timeout: float) -> str | None:
    try:
        image = await asyncio.wait_for(task, timeout)
    except asyncio.TimeoutError:
        logger.warning("[CERT-IMAGE] %s", ImageLoadTimeout(_short(slot.src), timeout))
        slot.settle(None)
        return slot.src
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.warning("[CERT-IMAGE] failed src=%s error=%s", _short(slot.src), exc)
        slot.settle(None)
        return slot.src
    slot.settle(image)
    return None


async def wait_for_images(surface: RenderSurface, timeout: float) -> list[str]:
    """Wait for every pending image; each one gets its own ``timeout``."""
    results = await asyncio.gather(
        *(_settle_image(slot, task, timeout) for slot, task in surface.loads)
    )
    return [src for src in results if src]


async def wait_until_ready(
    surface: RenderSurface, host: RenderHost, settings: RenderSettings
) -> ReadinessReport:
    fonts_loaded = await wait_for_fonts(host, settings.font_timeout)
    failed = await wait_for_images(surface, settings.image_timeout)
    if settings.settle_delay > 0:
        await asyncio.sleep(settings.settle_delay)
    return ReadinessReport(fonts_loaded=fonts_loaded, failed_images=failed)
