from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from .constants import (
    DEFAULT_BRAND,
    DEFAULT_CERTIFICATE_TYPE,
    DEFAULT_FONT_DIR,
    DEFAULT_FONT_TIMEOUT_SECONDS,
    DEFAULT_IMAGE_TIMEOUT_SECONDS,
    DEFAULT_LEFT_SIGNER_NAME,
    DEFAULT_RANK_TITLE,
    DEFAULT_RASTER_SCALE,
    DEFAULT_RENDER_DEADLINE_SECONDS,
    DEFAULT_RIGHT_SIGNER_NAME,
    DEFAULT_SETTLE_DELAY_SECONDS,
    MAX_RASTER_SCALE,
    MIN_RASTER_SCALE,
)
from .shared.time import fmt_certificate_date


class TemplateStyle(str, enum.Enum):
    TEMPLATE1 = "template1"
    TEMPLATE2 = "template2"
    TEMPLATE3 = "template3"
    TEMPLATE4 = "template4"

    @classmethod
    def resolve(cls, value: Any) -> "TemplateStyle":
        """Map any value onto a known style; unknown values become template1."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.TEMPLATE1


@dataclass(frozen=True)
class Signer:
    name: str
    title: str


@dataclass(frozen=True)
class CertificateData:
    participant_name: str
    hackathon_title: str
    company: str = ""
    team_name: str | None = None
    is_team: bool = False
    rank: int | None = None
    rank_title: str = DEFAULT_RANK_TITLE
    certificate_type: str = DEFAULT_CERTIFICATE_TYPE
    template_style: TemplateStyle = TemplateStyle.TEMPLATE1
    logo_url: str | None = None
    platform_logo_url: str | None = None
    signature_left_url: str | None = None
    signature_right_url: str | None = None
    custom_message: str | None = None
    signer_left: Signer = field(
        default_factory=lambda: Signer(DEFAULT_LEFT_SIGNER_NAME, "")
    )
    signer_right: Signer = field(
        default_factory=lambda: Signer(DEFAULT_RIGHT_SIGNER_NAME, "")
    )
    date: str = ""
    certificate_code: str | None = None

    @property
    def honoree_name(self) -> str:
        if self.is_team and (self.team_name or "").strip():
            return self.team_name.strip()
        return self.participant_name.strip()

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], *, brand: str = DEFAULT_BRAND
    ) -> "CertificateData":
        """Build a record from the upstream JSON (camelCase keys)."""
        if not isinstance(payload, Mapping):
            raise ValueError("Certificate payload must be an object.")
        participant = _clean(payload.get("participantName")) or ""
        title = _clean(payload.get("hackathonTitle"))
        if not title:
            raise ValueError("hackathonTitle is required.")
        company = _clean(payload.get("company")) or ""
        team_name = _clean(payload.get("teamName"))
        is_team = bool(payload.get("isTeam"))
        if not participant and not (is_team and team_name):
            raise ValueError("participantName is required.")
        return cls(
            participant_name=participant,
            hackathon_title=title,
            company=company,
            team_name=team_name,
            is_team=is_team,
            rank=normalize_rank(payload.get("rank")),
            rank_title=_clean(payload.get("rankTitle")) or DEFAULT_RANK_TITLE,
            certificate_type=_clean(payload.get("certificateType"))
            or DEFAULT_CERTIFICATE_TYPE,
            template_style=TemplateStyle.resolve(payload.get("templateStyle")),
            logo_url=_clean(payload.get("logoUrl")),
            platform_logo_url=_clean(payload.get("platformLogoUrl")),
            signature_left_url=_clean(payload.get("signatureLeftUrl")),
            signature_right_url=_clean(payload.get("signatureRightUrl")),
            custom_message=_clean(payload.get("customMessage")),
            signer_left=_signer(
                payload.get("signerLeft"), DEFAULT_LEFT_SIGNER_NAME, brand
            ),
            signer_right=_signer(
                payload.get("signerRight"), DEFAULT_RIGHT_SIGNER_NAME, company
            ),
            date=fmt_certificate_date(_clean(payload.get("date"))),
            certificate_code=_clean(payload.get("certificateCode")),
        )


def normalize_rank(value: Any) -> int | None:
    """Return 1, 2 or 3; everything else is "not top three"."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and value in (1, 2, 3):
        return value
    return None


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _signer(raw: Any, default_name: str, default_title: str) -> Signer:
    raw = raw if isinstance(raw, Mapping) else {}
    return Signer(
        name=_clean(raw.get("name")) or default_name,
        title=_clean(raw.get("title")) or default_title,
    )


@dataclass(frozen=True)
class RenderedDocument:
    pdf: bytes
    filename: str
    certificate_code: str
    template: TemplateStyle
    blank: bool = False


@dataclass(frozen=True)
class RenderSettings:
    brand: str = DEFAULT_BRAND
    raster_scale: float = DEFAULT_RASTER_SCALE
    image_timeout: float = DEFAULT_IMAGE_TIMEOUT_SECONDS
    font_timeout: float = DEFAULT_FONT_TIMEOUT_SECONDS
    settle_delay: float = DEFAULT_SETTLE_DELAY_SECONDS
    render_deadline: float = DEFAULT_RENDER_DEADLINE_SECONDS
    font_dir: str = DEFAULT_FONT_DIR

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "RenderSettings":
        scale = _float(config.get("CERT_RASTER_SCALE"), DEFAULT_RASTER_SCALE)
        return cls(
            brand=_clean(config.get("CERT_BRAND")) or DEFAULT_BRAND,
            raster_scale=max(MIN_RASTER_SCALE, min(scale, MAX_RASTER_SCALE)),
            image_timeout=_float(
                config.get("CERT_IMAGE_TIMEOUT"), DEFAULT_IMAGE_TIMEOUT_SECONDS
            ),
            font_timeout=_float(
                config.get("CERT_FONT_TIMEOUT"), DEFAULT_FONT_TIMEOUT_SECONDS
            ),
            settle_delay=_float(
                config.get("CERT_SETTLE_DELAY"), DEFAULT_SETTLE_DELAY_SECONDS
            ),
            render_deadline=_float(
                config.get("CERT_RENDER_DEADLINE"),
                DEFAULT_RENDER_DEADLINE_SECONDS,
                positive=True,
            ),
            font_dir=_clean(config.get("CERT_FONT_DIR")) or DEFAULT_FONT_DIR,
        )

    @classmethod
    def from_env(cls) -> "RenderSettings":
        return cls.from_mapping(os.environ)


def _float(value: Any, default: float, *, positive: bool = False) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if result < 0 or result != result or (positive and result == 0):
        return default
    return result
