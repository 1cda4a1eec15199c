"""Fixed certificate templates keyed by ``TemplateStyle``.

Each template turns a ``TemplateContext`` into the root ``Box`` of a 1122x794
scene graph. Adding a template means adding a function and a registry entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..constants import CERT_HEIGHT, CERT_WIDTH
from ..models import Signer, TemplateStyle
from .certificates_layout import (
    Box,
    Ellipse,
    ImageSlot,
    Node,
    Polygon,
    Rule,
    Style,
    Text,
    new_root,
)

logger = logging.getLogger("hackcert.render")

_CENTER_X = CERT_WIDTH / 2.0


@dataclass(frozen=True)
class TemplateContext:
    brand: str
    brand_mark: str
    honoree: str
    team_line: str | None
    body_text: str
    rank_heading: str
    rank_title: str
    certificate_type: str
    company: str
    company_mark: str
    date: str
    certificate_code: str
    platform_logo_url: str | None
    logo_url: str | None
    signer_left: Signer
    signer_right: Signer
    signature_left_url: str | None
    signature_right_url: str | None


@dataclass(frozen=True)
class CertificateTemplate:
    style: TemplateStyle
    name: str
    render: Callable[[TemplateContext], Box]
    honors_custom_message: bool = False


def _centered(text: str, top: float, size: float, *, font: str = "Helvetica",
              color: str = "#000000", width: float = 900.0,
              min_size: float | None = None, height: float | None = None) -> Text:
    return Text(
        _CENTER_X - width / 2.0,
        top,
        width,
        height or size * 1.4,
        text=text,
        font=font,
        size=size,
        min_size=min_size,
        color=color,
    )


def _logo(x: float, y: float, size: float, src: str | None, mark: str,
          fill: str, radius: float = 8.0) -> ImageSlot:
    return ImageSlot(
        x,
        y,
        size,
        size,
        src=src,
        fallback_text=mark,
        fallback_fill=fill,
        radius=radius,
    )


def _signature_block(center_x: float, top: float, signer: Signer, src: str | None,
                     *, rule_color: str, name_color: str, title_color: str,
                     width: float = 180.0) -> list[Node]:
    left = center_x - width / 2.0
    nodes: list[Node] = []
    if src:
        nodes.append(
            ImageSlot(
                center_x - 70,
                top,
                140,
                45,
                src=src,
                fallback_text="Signature",
                fallback_fill=None,
                fallback_color="#4b5563",
                fallback_font="Times-Italic",
            )
        )
    else:
        nodes.append(
            Text(left, top + 8, width, 34, text="Signature", font="Times-Italic",
                 size=24, color="#4b5563")
        )
    nodes.append(Rule(left, top + 50, width, 0, color=rule_color, width=2))
    nodes.append(
        Text(left - 20, top + 58, width + 40, 18, text=signer.name,
             font="Helvetica-Bold", size=12, min_size=9, color=name_color)
    )
    nodes.append(
        Text(left - 20, top + 77, width + 40, 16, text=signer.title,
             size=10, min_size=8, color=title_color)
    )
    return nodes


def _team_text(ctx: TemplateContext, top: float, color: str) -> list[Node]:
    if not ctx.team_line:
        return []
    return [_centered(ctx.team_line, top, 14, font="Helvetica-Oblique", color=color)]


def render_classic(ctx: TemplateContext) -> Box:
    root = new_root(fill="#f5f5f5", gradient=("#f5f5f5", "#e8e8e8"))
    card = Box(40, 40, CERT_WIDTH - 80, CERT_HEIGHT - 80, fill="#ffffff", radius=15)
    bottom = CERT_HEIGHT - 40
    corners = [
        Polygon(40, bottom - 200, 300, 200,
                points=((40, bottom), (340, bottom), (40, bottom - 200)),
                fill="#2563eb", style=Style(opacity=0.9)),
        Polygon(CERT_WIDTH - 340, bottom - 200, 300, 200,
                points=((CERT_WIDTH - 40, bottom), (CERT_WIDTH - 40, bottom - 200),
                        (CERT_WIDTH - 340, bottom)),
                fill="#2563eb", style=Style(opacity=0.9)),
    ]
    header = [
        _logo(100, 90, 50, ctx.platform_logo_url, ctx.brand_mark, "#1e40af"),
        Text(160, 93, 300, 24, text=ctx.brand.upper(), font="Helvetica-Bold",
             size=18, color="#1e40af", align="left"),
        Text(160, 117, 300, 14, text="PLATFORM", size=10, color="#6b7280",
             align="left"),
        _logo(CERT_WIDTH - 150, 90, 50, ctx.logo_url, ctx.company_mark, "#3b82f6"),
    ]
    body: list[Node] = [
        _centered("CERTIFICATE", 150, 64, font="Helvetica-Bold", color="#1e40af"),
        _centered(f"OF {ctx.rank_heading}", 232, 20, color="#6b7280"),
        _centered("This certificate is proudly presented to", 268, 16,
                  color="#6b7280"),
        _centered(ctx.honoree, 296, 52, font="Times-Italic", color="#1f2937",
                  width=700, min_size=30),
        Rule(_CENTER_X - 225, 370, 450, 0, color="#e5e7eb", width=2),
    ]
    body += _team_text(ctx, 378, "#9ca3af")
    body += [
        Text(_CENTER_X - 350, 408, 700, 72, text=ctx.body_text, size=15,
             color="#4b5563", wrap=True, line_height=1.6),
        Box(_CENTER_X - 110, 486, 220, 56, fill="#f9fafb", outline="#e5e7eb",
            outline_width=1, radius=8),
        _centered("Organized by", 494, 11, color="#9ca3af", width=220),
        _centered(ctx.company, 510, 18, font="Helvetica-Bold", color="#1e40af",
                  width=210, min_size=11),
    ]
    footer = _signature_block(
        190, 590, ctx.signer_left, ctx.signature_left_url,
        rule_color="#1f2937", name_color="#1f2937", title_color="#9ca3af",
    )
    footer += _signature_block(
        CERT_WIDTH - 190, 590, ctx.signer_right, ctx.signature_right_url,
        rule_color="#1f2937", name_color="#1f2937", title_color="#9ca3af",
    )
    footer += [
        _centered(ctx.date, 630, 14, color="#6b7280", width=300),
        Box(_CENTER_X - 120, 660, 240, 30, gradient=("#1e40af", "#3b82f6"), radius=8),
        _centered(f"CODE: {ctx.certificate_code}", 667, 12,
                  font="Helvetica-Bold", color="#ffffff", width=230),
    ]
    card.add(*corners, *header, *body, *footer)
    return root.add(card)


def render_royal(ctx: TemplateContext) -> Box:
    root = new_root(fill="#fffdf5")
    frame = [
        Box(20, 20, CERT_WIDTH - 40, CERT_HEIGHT - 40, outline="#b8860b",
            outline_width=6),
        Box(36, 36, CERT_WIDTH - 72, CERT_HEIGHT - 72, outline="#daa520",
            outline_width=2),
    ]
    header = [
        _logo(70, 60, 56, ctx.platform_logo_url, ctx.brand_mark, "#b8860b", 28),
        _logo(CERT_WIDTH - 126, 60, 56, ctx.logo_url, ctx.company_mark, "#b8860b", 28),
        _centered(ctx.certificate_type.upper(), 108, 44, font="Times-Bold",
                  color="#7a5c00", width=820, min_size=26),
        _centered(ctx.rank_title, 170, 18, color="#8a7340"),
        Rule(_CENTER_X - 150, 205, 300, 0, color="#daa520", width=2),
        _centered("This is proudly presented to", 228, 16, color="#6b5b3e"),
        _centered(ctx.honoree, 258, 54, font="Times-BoldItalic", color="#3b2f0b",
                  width=760, min_size=30),
    ]
    body = _team_text(ctx, 338, "#8a7340")
    body += [
        Text(_CENTER_X - 370, 372, 740, 100, text=ctx.body_text, font="Times-Roman",
             size=17, color="#4a4a4a", wrap=True, line_height=1.5),
        Ellipse(_CENTER_X - 45, 480, 90, 90, fill="#daa520", outline="#b8860b",
                outline_width=4),
        _centered(ctx.brand_mark, 510, 26, font="Times-Bold", color="#ffffff",
                  width=90),
        _centered(f"Organized by {ctx.company}", 578, 13, color="#6b5b3e",
                  width=600, min_size=9),
    ]
    footer = _signature_block(
        250, 600, ctx.signer_left, ctx.signature_left_url,
        rule_color="#b8860b", name_color="#3b2f0b", title_color="#8a7340",
    )
    footer += _signature_block(
        CERT_WIDTH - 250, 600, ctx.signer_right, ctx.signature_right_url,
        rule_color="#b8860b", name_color="#3b2f0b", title_color="#8a7340",
    )
    footer.append(
        _centered(f"{ctx.date}  |  Certificate Code: {ctx.certificate_code}", 712,
                  12, color="#8a7340")
    )
    return root.add(*frame, *header, *body, *footer)


def render_modern(ctx: TemplateContext) -> Box:
    root = new_root(fill="#ffffff")
    band = Box(0, 0, 300, CERT_HEIGHT, gradient=("#0f172a", "#334155"))
    band.add(
        _logo(110, 70, 80, ctx.platform_logo_url, ctx.brand_mark, "#14b8a6", 12),
        Text(20, 165, 260, 26, text=ctx.brand.upper(), font="Helvetica-Bold",
             size=20, color="#ffffff"),
        _logo(110, 560, 80, ctx.logo_url, ctx.company_mark, "#14b8a6", 12),
        Text(20, 652, 260, 16, text="Organized by", size=11, color="#94a3b8"),
        Text(20, 670, 260, 24, text=ctx.company, font="Helvetica-Bold", size=16,
             min_size=10, color="#ffffff"),
    )
    left = 360.0
    width = CERT_WIDTH - left - 60
    body: list[Node] = [
        Text(left, 88, width, 52, text=ctx.certificate_type, font="Helvetica-Bold",
             size=40, min_size=24, color="#0f172a", align="left"),
        Text(left, 145, width, 24, text=ctx.rank_title, size=18, color="#14b8a6",
             align="left"),
        Rule(left, 182, 120, 0, color="#14b8a6", width=4),
        Text(left, 218, width, 20, text="Awarded to", size=15, color="#64748b",
             align="left"),
        Text(left, 246, width, 64, text=ctx.honoree, font="Helvetica-Bold", size=48,
             min_size=26, color="#0f172a", align="left"),
    ]
    if ctx.team_line:
        body.append(
            Text(left, 316, width, 20, text=ctx.team_line, font="Helvetica-Oblique",
                 size=14, color="#64748b", align="left")
        )
    body.append(
        Text(left, 356, width - 40, 120, text=ctx.body_text, size=16,
             color="#334155", align="left", wrap=True, line_height=1.6)
    )
    footer = _signature_block(
        left + 120, 560, ctx.signer_left, ctx.signature_left_url,
        rule_color="#0f172a", name_color="#0f172a", title_color="#64748b",
    )
    footer += _signature_block(
        CERT_WIDTH - 180, 560, ctx.signer_right, ctx.signature_right_url,
        rule_color="#0f172a", name_color="#0f172a", title_color="#64748b",
    )
    footer += [
        Text(left, 716, 300, 18, text=f"Date: {ctx.date}", size=12,
             color="#64748b", align="left"),
        Text(CERT_WIDTH - 460, 716, 400, 18, text=f"Code: {ctx.certificate_code}",
             font="Courier", size=12, color="#64748b", align="right"),
    ]
    return root.add(band, *body, *footer)


def render_minimal(ctx: TemplateContext) -> Box:
    root = new_root(fill="#ffffff")
    nodes: list[Node] = [
        Box(30, 30, CERT_WIDTH - 60, CERT_HEIGHT - 60, outline="#d1d5db",
            outline_width=1),
        _logo(_CENTER_X - 60, 60, 50, ctx.platform_logo_url, ctx.brand_mark,
              "#111827", 25),
        _logo(_CENTER_X + 10, 60, 50, ctx.logo_url, ctx.company_mark, "#6b7280", 25),
        _centered(ctx.certificate_type.upper(), 138, 30, color="#111827",
                  min_size=18),
        _centered(ctx.rank_title, 184, 14, color="#6b7280"),
        _centered(ctx.honoree, 236, 50, font="Times-Roman", color="#111827",
                  width=760, min_size=30),
        Rule(_CENTER_X - 200, 312, 400, 0, color="#111827", width=1),
    ]
    nodes += _team_text(ctx, 322, "#6b7280")
    nodes += [
        Text(_CENTER_X - 330, 362, 660, 90, text=ctx.body_text, size=15,
             color="#374151", wrap=True, line_height=1.6),
        _centered(f"Organized by {ctx.company}", 468, 13, color="#6b7280",
                  min_size=9),
    ]
    nodes += _signature_block(
        300, 580, ctx.signer_left, ctx.signature_left_url,
        rule_color="#111827", name_color="#111827", title_color="#6b7280",
    )
    nodes += _signature_block(
        CERT_WIDTH - 300, 580, ctx.signer_right, ctx.signature_right_url,
        rule_color="#111827", name_color="#111827", title_color="#6b7280",
    )
    nodes.append(
        _centered(f"{ctx.date}  ·  {ctx.certificate_code}", 714, 11, color="#9ca3af")
    )
    return root.add(*nodes)


TEMPLATE_REGISTRY: dict[TemplateStyle, CertificateTemplate] = {
    TemplateStyle.TEMPLATE1: CertificateTemplate(
        TemplateStyle.TEMPLATE1, "Classic Blue", render_classic
    ),
    TemplateStyle.TEMPLATE2: CertificateTemplate(
        TemplateStyle.TEMPLATE2, "Royal Gold", render_royal, honors_custom_message=True
    ),
    TemplateStyle.TEMPLATE3: CertificateTemplate(
        TemplateStyle.TEMPLATE3, "Modern Slate", render_modern
    ),
    TemplateStyle.TEMPLATE4: CertificateTemplate(
        TemplateStyle.TEMPLATE4, "Minimal", render_minimal
    ),
}


def resolve_template(value: Any) -> CertificateTemplate:
    style = TemplateStyle.resolve(value)
    requested = value.value if isinstance(value, TemplateStyle) else value
    if requested is not None and str(requested).strip().lower() != style.value:
        logger.info(
            "[CERT-TEMPLATE] unknown style=%r fallback=%s", value, style.value
        )
    return TEMPLATE_REGISTRY[style]


def list_templates() -> list[tuple[str, str, bool]]:
    return [
        (tmpl.style.value, tmpl.name, tmpl.honors_custom_message)
        for tmpl in TEMPLATE_REGISTRY.values()
    ]
