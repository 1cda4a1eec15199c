import json
import os

import click
from flask import current_app
from flask.cli import FlaskGroup

from hackcert.app import create_app
from hackcert.errors import CertificateRenderError
from hackcert.models import CertificateData
from hackcert.services.certificates_export import render_certificate_pdf
from hackcert.services.render_host import ImageLoader, RenderHost
from hackcert.shared.certificate_templates import list_templates as registered_templates
from hackcert.shared.storage import write_atomic

cli = FlaskGroup(create_app=create_app)


def _output_path(out_dir: str, filename: str) -> str:
    """Place ``filename`` directly inside ``out_dir``."""
    for sep in (os.sep, os.altsep):
        if sep:
            filename = filename.replace(sep, "_")
    root = os.path.realpath(out_dir)
    path = os.path.realpath(os.path.join(root, filename))
    if os.path.dirname(path) != root:
        raise click.ClickException(f"Refusing to write outside {out_dir}: {filename}")
    return path


@cli.command("gen_cert")
@click.option(
    "--input", "input_path", required=True, type=click.Path(exists=True, dir_okay=False)
)
@click.option("--out", "out_dir", required=True, type=click.Path(file_okay=False))
def gen_cert(input_path: str, out_dir: str):
    """Render a certificate record (JSON) to a PDF in OUT."""
    settings = current_app.extensions["render_host"].settings
    with open(input_path, encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as exc:
            raise click.ClickException(f"Invalid JSON: {exc}") from exc
    try:
        data = CertificateData.from_payload(payload, brand=settings.brand)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    # local logo and signature files are allowed from the command line
    host = RenderHost(settings, image_loader=ImageLoader(allow_local=True))
    try:
        document = render_certificate_pdf(data, host=host)
    except CertificateRenderError as exc:
        raise click.ClickException(f"Could not generate certificate: {exc}") from exc
    finally:
        host.close()
    path = _output_path(out_dir, document.filename)
    write_atomic(path, document.pdf)
    if document.blank:
        click.echo("warning: capture looked blank", err=True)
    click.echo(path)


@cli.command("list_templates")
def list_templates():
    for style, name, custom in registered_templates():
        suffix = " (custom message)" if custom else ""
        click.echo(f"{style}\t{name}{suffix}")


if __name__ == "__main__":
    cli()
