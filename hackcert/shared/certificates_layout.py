"""Scene graph for composed certificates.

Coordinates are absolute logical units inside the 1122x794 document; the
rasterizer multiplies them by its oversampling factor. ``Style.offset``
translates a node together with its subtree.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from ..constants import CERT_HEIGHT, CERT_WIDTH

FONT_CODES: tuple[str, ...] = (
    "Helvetica",
    "Helvetica-Bold",
    "Helvetica-Oblique",
    "Helvetica-BoldOblique",
    "Times-Roman",
    "Times-Bold",
    "Times-Italic",
    "Times-BoldItalic",
    "Courier",
    "Courier-Bold",
)

SAFE_FALLBACK_FONT = "Helvetica"

ROOT_ID = "certificate-content"


@dataclass
class Style:
    visible: bool = True
    opacity: float = 1.0
    position: str = "relative"
    offset: tuple[float, float] = (0.0, 0.0)


@dataclass
class Node:
    x: float
    y: float
    w: float
    h: float
    style: Style = field(default_factory=Style)
    children: list["Node"] = field(default_factory=list)
    node_id: str | None = None

    def add(self, *nodes: "Node") -> "Node":
        self.children.extend(nodes)
        return self

    def walk(self) -> Iterator["Node"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def clone(self) -> "Node":
        return replace(
            self,
            style=replace(self.style),
            children=[child.clone() for child in self.children],
        )


@dataclass
class Box(Node):
    fill: str | None = None
    gradient: tuple[str, str] | None = None
    outline: str | None = None
    outline_width: float = 0.0
    radius: float = 0.0


@dataclass
class Ellipse(Node):
    fill: str | None = None
    outline: str | None = None
    outline_width: float = 0.0


@dataclass
class Polygon(Node):
    points: tuple[tuple[float, float], ...] = ()
    fill: str = "#000000"


@dataclass
class Rule(Node):
    """Straight line from (x, y) to (x + w, y + h)."""

    color: str = "#000000"
    width: float = 1.0


@dataclass
class Text(Node):
    text: str = ""
    font: str = SAFE_FALLBACK_FONT
    size: float = 16.0
    min_size: float | None = None
    color: str = "#000000"
    align: str = "center"
    wrap: bool = False
    line_height: float = 1.4


@dataclass
class ImageSlot(Node):
    src: str | None = None
    fallback_text: str = ""
    fallback_fill: str | None = "#1e40af"
    fallback_color: str = "#ffffff"
    fallback_font: str = "Helvetica-Bold"
    radius: float = 0.0
    state: str = "empty"
    image: Any = field(default=None, compare=False, repr=False)

    def settle(self, image: Any = None) -> None:
        self.image = image
        self.state = "loaded" if image is not None else "error"


@dataclass
class CertificateDocument:
    root: Box
    template: Any
    honoree: str
    achievement_text: str
    certificate_code: str
    width: int = CERT_WIDTH
    height: int = CERT_HEIGHT

    def nodes(self) -> Iterator[Node]:
        return self.root.walk()

    def images(self) -> list[ImageSlot]:
        return [node for node in self.nodes() if isinstance(node, ImageSlot)]

    def text_content(self) -> str:
        return " ".join(
            node.text for node in self.nodes() if isinstance(node, Text) and node.text
        )

    def clone(self) -> "CertificateDocument":
        return replace(self, root=self.root.clone())


def new_root(fill: str = "#ffffff", gradient: tuple[str, str] | None = None) -> Box:
    return Box(
        0,
        0,
        CERT_WIDTH,
        CERT_HEIGHT,
        fill=fill,
        gradient=gradient,
        node_id=ROOT_ID,
    )
