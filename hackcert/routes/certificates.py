from __future__ import annotations

from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, send_file

from ..models import CertificateData
from ..services.certificates_export import render_certificate_pdf, render_preview
from ..shared.certificate_templates import list_templates

bp = Blueprint("certificates", __name__, url_prefix="/certificates")


def _host():
    return current_app.extensions["render_host"]


def _payload() -> CertificateData:
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValueError("Invalid request payload.")
    return CertificateData.from_payload(payload, brand=_host().settings.brand)


@bp.get("/templates")
def templates():
    return jsonify(
        [
            {"id": style, "name": name, "customMessage": custom}
            for style, name, custom in list_templates()
        ]
    )


@bp.post("/render")
def render():
    try:
        data = _payload()
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        document = render_certificate_pdf(data, host=_host())
    except Exception:
        current_app.logger.exception(
            "Certificate render failed title=%r", data.hackathon_title
        )
        return jsonify({"error": "Could not generate certificate."}), 500
    response = send_file(
        BytesIO(document.pdf),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=document.filename,
    )
    response.headers["X-Certificate-Code"] = document.certificate_code
    if document.blank:
        response.headers["X-Certificate-Blank"] = "1"
    return response


@bp.post("/preview")
def preview():
    try:
        data = _payload()
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        result = render_preview(data, host=_host())
    except Exception:
        current_app.logger.exception("Certificate preview failed")
        return jsonify({"error": "Failed to generate preview."}), 500
    return jsonify(
        {
            "image": f"data:image/png;base64,{result.image_base64}",
            "warnings": list(result.warnings),
        }
    )
