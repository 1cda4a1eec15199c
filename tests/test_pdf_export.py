import re
from io import BytesIO

import pytest
from PIL import Image
from PyPDF2 import PdfReader

from hackcert.services.pdf_export import CERT_ASPECT, PAGE_SIZE, fit_image_rect, serialize_pdf


def test_page_is_a4_landscape():
    width, height = PAGE_SIZE
    assert width == pytest.approx(841.89, abs=0.01)
    assert height == pytest.approx(595.28, abs=0.01)


def test_image_rect_keeps_aspect_and_is_centered():
    page_w, page_h = PAGE_SIZE
    x, y, w, h = fit_image_rect(page_w, page_h)
    assert w / h == pytest.approx(1122 / 794)
    assert w <= page_w + 1e-9 and h <= page_h + 1e-9
    assert x * 2 + w == pytest.approx(page_w)
    assert y * 2 + h == pytest.approx(page_h)


def test_image_rect_tall_page():
    x, y, w, h = fit_image_rect(100, 500, aspect=2.0)
    assert (x, w, h) == (0, 100, 50)
    assert y == pytest.approx(225)


@pytest.mark.smoke
def test_serialized_pdf_has_one_landscape_page():
    image = Image.new("RGB", (1122, 794), "#1e40af")
    pdf = serialize_pdf(
        image, title="Saarthix Certificate - Jane Doe", author="Saarthix", subject="Hack"
    )
    assert pdf.startswith(b"%PDF")
    reader = PdfReader(BytesIO(pdf))
    assert len(reader.pages) == 1
    box = reader.pages[0].mediabox
    assert float(box.width) == pytest.approx(841.89, abs=0.01)
    assert float(box.height) == pytest.approx(595.28, abs=0.01)
    assert float(box.width) / float(box.height) == pytest.approx(297 / 210, rel=1e-3)
    assert reader.metadata.title == "Saarthix Certificate - Jane Doe"
    assert reader.metadata.author == "Saarthix"


def test_aspect_constant():
    assert CERT_ASPECT == pytest.approx(1.4131, abs=1e-4)


_PLACEMENT_RE = re.compile(
    rb"([-\d.]+)\s+([-\d.]+)\s+([-\d.]+)\s+([-\d.]+)\s+([-\d.]+)\s+([-\d.]+)\s+cm\s*/\S+\s+Do"
)


def test_embedded_raster_keeps_certificate_aspect():
    image = Image.new("RGB", (2244, 1588), "#0f172a")
    reader = PdfReader(BytesIO(serialize_pdf(image)))
    content = reader.pages[0].get_contents().get_data()
    placements = _PLACEMENT_RE.findall(content)
    assert len(placements) == 1
    w, b, c, h, x, y = (float(v) for v in placements[0])
    assert (b, c) == (0, 0)
    assert w / h == pytest.approx(1122 / 794, rel=1e-3)
    page_w, page_h = PAGE_SIZE
    assert x * 2 + w == pytest.approx(page_w, abs=0.05)
    assert y * 2 + h == pytest.approx(page_h, abs=0.05)
