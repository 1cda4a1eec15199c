from __future__ import annotations

import asyncio
import logging

from PIL import Image, ImageColor, ImageDraw, ImageOps

from ..errors import RasterizationFailure, RenderSurfaceMissing
from ..models import RenderSettings
from ..shared.certificates_layout import (
    Box,
    CertificateDocument,
    Ellipse,
    ImageSlot,
    Node,
    Polygon,
    Rule,
    Text,
)
from .render_host import FontBook, RenderHost, RenderSurface

logger = logging.getLogger("hackcert.render")

_BACKGROUND = "#ffffff"


def prepare_for_capture(document: CertificateDocument) -> CertificateDocument:
    """Return a capture-ready clone of ``document``.

    Every node is forced visible at full opacity and the root is put back in
    normal flow, so hidden or translated state inherited from the surface
    cannot produce an empty capture.
    """
    clone = document.clone()
    for node in clone.nodes():
        node.style.visible = True
        node.style.opacity = 1.0
    clone.root.style.position = "static"
    clone.root.style.offset = (0.0, 0.0)
    return clone


def _rgba(color: str, alpha: float) -> tuple[int, int, int, int]:
    r, g, b = ImageColor.getrgb(color)[:3]
    return r, g, b, int(round(255 * max(0.0, min(alpha, 1.0))))


def _px(value: float, scale: float) -> int:
    return int(round(value * scale))


def _fit_font(text: str, code: str, max_pt: float, min_pt: float,
              max_width_px: float, scale: float, fonts: FontBook):
    pt = max_pt
    while True:
        font = fonts.font(code, _px(pt, scale))
        if font.getlength(text) <= max_width_px or pt <= min_pt:
            return font
        pt = max(pt - 1, min_pt)


def _wrap(text: str, font, max_width_px: float) -> list[str]:
    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if current and font.getlength(candidate) > max_width_px:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def _draw_line(draw: ImageDraw.ImageDraw, line: str, font, left: float, top: float,
               width: float, align: str, fill) -> None:
    length = font.getlength(line)
    if align == "left":
        x = left
    elif align == "right":
        x = left + width - length
    else:
        x = left + (width - length) / 2
    draw.text((round(x), round(top)), line, font=font, fill=fill)


def _draw_text(draw, node: Text, fonts: FontBook, scale: float,
               ox: float, oy: float, alpha: float) -> None:
    if not node.text:
        return
    fill = _rgba(node.color, alpha)
    left = (ox + node.x) * scale
    top = (oy + node.y) * scale
    width = node.w * scale
    if node.wrap:
        font = fonts.font(node.font, _px(node.size, scale))
        step = node.size * node.line_height * scale
        for index, line in enumerate(_wrap(node.text, font, width)):
            _draw_line(draw, line, font, left, top + index * step, width, node.align, fill)
        return
    font = _fit_font(
        node.text, node.font, node.size, node.min_size or node.size, width, scale, fonts
    )
    _draw_line(draw, node.text, font, left, top, width, node.align, fill)


def _paste_gradient(canvas: Image.Image, box: tuple[int, int, int, int],
                    colors: tuple[str, str], radius: int, alpha: float) -> None:
    x0, y0, x1, y1 = box
    size = (max(x1 - x0, 1), max(y1 - y0, 1))
    start = Image.new("RGB", size, colors[0])
    end = Image.new("RGB", size, colors[1])
    ramp = Image.linear_gradient("L").resize(size)
    tile = Image.composite(end, start, ramp)
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle(
        (0, 0, size[0] - 1, size[1] - 1), radius=radius, fill=int(round(255 * alpha))
    )
    canvas.paste(tile, (x0, y0), mask)


def _draw_box(canvas, draw, node: Box, scale: float, ox: float, oy: float,
              alpha: float) -> None:
    box = (
        _px(ox + node.x, scale),
        _px(oy + node.y, scale),
        _px(ox + node.x + node.w, scale),
        _px(oy + node.y + node.h, scale),
    )
    radius = _px(node.radius, scale)
    if node.gradient:
        _paste_gradient(canvas, box, node.gradient, radius, alpha)
    elif node.fill:
        draw.rounded_rectangle(box, radius=radius, fill=_rgba(node.fill, alpha))
    if node.outline and node.outline_width > 0:
        draw.rounded_rectangle(
            box,
            radius=radius,
            outline=_rgba(node.outline, alpha),
            width=max(_px(node.outline_width, scale), 1),
        )


def _draw_image(canvas, draw, node: ImageSlot, fonts: FontBook, scale: float,
                ox: float, oy: float, alpha: float) -> None:
    x = _px(ox + node.x, scale)
    y = _px(oy + node.y, scale)
    w = max(_px(node.w, scale), 1)
    h = max(_px(node.h, scale), 1)
    if node.state == "loaded" and node.image is not None:
        picture = ImageOps.contain(node.image.convert("RGBA"), (w, h))
        if alpha < 1.0:
            picture.putalpha(picture.getchannel("A").point(lambda v: int(v * alpha)))
        canvas.paste(
            picture,
            (x + (w - picture.width) // 2, y + (h - picture.height) // 2),
            picture,
        )
        return
    if node.fallback_fill:
        draw.rounded_rectangle(
            (x, y, x + w, y + h),
            radius=_px(node.radius, scale),
            fill=_rgba(node.fallback_fill, alpha),
        )
    if node.fallback_text:
        font = _fit_font(
            node.fallback_text, node.fallback_font, max(node.h * 0.45, 8), 8,
            w * 0.9, scale, fonts,
        )
        left, top, right, bottom = draw.textbbox((0, 0), node.fallback_text, font=font)
        draw.text(
            (x + (w - (right - left)) / 2 - left, y + (h - (bottom - top)) / 2 - top),
            node.fallback_text,
            font=font,
            fill=_rgba(node.fallback_color, alpha),
        )


def _draw_node(canvas, draw, node: Node, fonts: FontBook, scale: float,
               origin: tuple[float, float], opacity: float) -> None:
    if not node.style.visible:
        return
    alpha = opacity * node.style.opacity
    if alpha <= 0:
        return
    ox = origin[0] + node.style.offset[0]
    oy = origin[1] + node.style.offset[1]
    if isinstance(node, Box):
        _draw_box(canvas, draw, node, scale, ox, oy, alpha)
    elif isinstance(node, Ellipse):
        box = (
            _px(ox + node.x, scale),
            _px(oy + node.y, scale),
            _px(ox + node.x + node.w, scale),
            _px(oy + node.y + node.h, scale),
        )
        draw.ellipse(
            box,
            fill=_rgba(node.fill, alpha) if node.fill else None,
            outline=_rgba(node.outline, alpha) if node.outline else None,
            width=max(_px(node.outline_width, scale), 1),
        )
    elif isinstance(node, Polygon):
        points = [((ox + px) * scale, (oy + py) * scale) for px, py in node.points]
        if len(points) >= 3:
            draw.polygon(points, fill=_rgba(node.fill, alpha))
    elif isinstance(node, Rule):
        draw.line(
            [
                ((ox + node.x) * scale, (oy + node.y) * scale),
                ((ox + node.x + node.w) * scale, (oy + node.y + node.h) * scale),
            ],
            fill=_rgba(node.color, alpha),
            width=max(_px(node.width, scale), 1),
        )
    elif isinstance(node, Text):
        _draw_text(draw, node, fonts, scale, ox, oy, alpha)
    elif isinstance(node, ImageSlot):
        _draw_image(canvas, draw, node, fonts, scale, ox, oy, alpha)
    for child in node.children:
        _draw_node(canvas, draw, child, fonts, scale, (ox, oy), alpha)


def capture(document: CertificateDocument, fonts: FontBook, scale: float = 2.0,
            *, prepare: bool = True) -> Image.Image:
    """Draw ``document`` into an RGB buffer of its logical size times ``scale``."""
    if prepare:
        document = prepare_for_capture(document)
    size = (_px(document.width, scale), _px(document.height, scale))
    canvas = Image.new("RGB", size, _BACKGROUND)
    draw = ImageDraw.Draw(canvas, "RGBA")
    _draw_node(canvas, draw, document.root, fonts, scale, (0.0, 0.0), 1.0)
    return canvas


async def rasterize(
    surface: RenderSurface, host: RenderHost, settings: RenderSettings
) -> Image.Image:
    document = surface.document
    if document is None:
        raise RenderSurfaceMissing(f"surface {surface.surface_id} has no document")
    try:
        image = await asyncio.to_thread(
            capture, document, host.fonts, settings.raster_scale
        )
    except Exception as exc:
        raise RasterizationFailure(
            f"capture failed on surface {surface.surface_id}: {exc}"
        ) from exc
    logger.info(
        "[CERT-RENDER] captured surface=%s size=%dx%d scale=%.1f",
        surface.surface_id,
        image.width,
        image.height,
        settings.raster_scale,
    )
    return image
