from __future__ import annotations

from datetime import datetime

from ..constants import DEFAULT_BRAND
from ..models import CertificateData, Signer
from .achievement import compose_achievement_text, rank_heading
from .certificate_templates import TemplateContext, resolve_template
from .certificates_layout import CertificateDocument
from .codes import generate_certificate_code
from .names import initials
from .time import fmt_certificate_date


def team_line(data: CertificateData) -> str | None:
    team = (data.team_name or "").strip()
    participant = data.participant_name.strip()
    if data.is_team and team and participant:
        return f"Team Leader: {participant}"
    if not data.is_team and team:
        return f"Member of Team: {team}"
    return None


def body_text(
    data: CertificateData, honors_custom_message: bool, date: str | None = None
) -> str:
    message = (data.custom_message or "").strip()
    if honors_custom_message and message:
        return message
    return compose_achievement_text(
        data.rank, data.hackathon_title, date or data.date
    )


def compose_document(
    data: CertificateData,
    *,
    brand: str = DEFAULT_BRAND,
    code: str | None = None,
    now: datetime | None = None,
) -> CertificateDocument:
    """Lay out ``data`` with its template; nothing is loaded or drawn yet."""
    template = resolve_template(data.template_style)
    certificate_code = code or data.certificate_code or generate_certificate_code(now)
    honoree = data.honoree_name
    date = data.date.strip() or fmt_certificate_date(None)
    text = body_text(data, template.honors_custom_message, date)
    company = data.company.strip()
    context = TemplateContext(
        brand=brand,
        brand_mark=initials(brand),
        honoree=honoree,
        team_line=team_line(data),
        body_text=text,
        rank_heading=rank_heading(data.rank),
        rank_title=data.rank_title,
        certificate_type=data.certificate_type,
        company=company,
        company_mark=initials(company),
        date=date,
        certificate_code=certificate_code,
        platform_logo_url=data.platform_logo_url,
        logo_url=data.logo_url,
        signer_left=Signer(
            data.signer_left.name, data.signer_left.title.strip() or brand
        ),
        signer_right=Signer(
            data.signer_right.name, data.signer_right.title.strip() or company
        ),
        signature_left_url=data.signature_left_url,
        signature_right_url=data.signature_right_url,
    )
    return CertificateDocument(
        root=template.render(context),
        template=template.style,
        honoree=honoree,
        achievement_text=text,
        certificate_code=certificate_code,
    )
