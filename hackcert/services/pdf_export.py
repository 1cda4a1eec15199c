from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..constants import CERT_HEIGHT, CERT_WIDTH

logger = logging.getLogger("hackcert.render")

PAGE_SIZE = landscape(A4)
CERT_ASPECT = CERT_WIDTH / CERT_HEIGHT


def fit_image_rect(
    page_width: float, page_height: float, aspect: float = CERT_ASPECT
) -> tuple[float, float, float, float]:
    """Largest ``aspect`` rectangle inside the page, centered: (x, y, w, h)."""
    width = page_width
    height = page_width / aspect
    if height > page_height:
        height = page_height
        width = page_height * aspect
    return (page_width - width) / 2, (page_height - height) / 2, width, height


def serialize_pdf(
    image: Image.Image,
    *,
    title: str = "Certificate",
    author: str = "",
    subject: str = "",
) -> bytes:
    """Embed ``image`` on a single A4-landscape page and return the PDF bytes."""
    page_width, page_height = PAGE_SIZE
    x, y, width, height = fit_image_rect(page_width, page_height)
    png = BytesIO()
    image.convert("RGB").save(png, format="PNG")
    png.seek(0)

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=PAGE_SIZE, pageCompression=1)
    c.setTitle(title)
    c.setAuthor(author)
    c.setSubject(subject)
    c.drawImage(ImageReader(png), x, y, width=width, height=height)
    c.showPage()
    c.save()
    pdf_bytes = buffer.getvalue()
    logger.info(
        "[CERT-PDF] bytes=%d image=%dx%d placed=%.1fx%.1fpt at (%.2f, %.2f)",
        len(pdf_bytes),
        image.width,
        image.height,
        width,
        height,
        x,
        y,
    )
    return pdf_bytes
