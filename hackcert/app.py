import atexit
import os

from flask import Flask

from .constants import (
    DEFAULT_BRAND,
    DEFAULT_FONT_DIR,
    DEFAULT_FONT_TIMEOUT_SECONDS,
    DEFAULT_IMAGE_TIMEOUT_SECONDS,
    DEFAULT_RASTER_SCALE,
    DEFAULT_RENDER_DEADLINE_SECONDS,
    DEFAULT_SETTLE_DELAY_SECONDS,
)
from .models import RenderSettings
from .services.render_host import ImageLoader, RenderHost

_CONFIG_DEFAULTS = {
    "CERT_BRAND": DEFAULT_BRAND,
    "CERT_RASTER_SCALE": DEFAULT_RASTER_SCALE,
    "CERT_IMAGE_TIMEOUT": DEFAULT_IMAGE_TIMEOUT_SECONDS,
    "CERT_FONT_TIMEOUT": DEFAULT_FONT_TIMEOUT_SECONDS,
    "CERT_SETTLE_DELAY": DEFAULT_SETTLE_DELAY_SECONDS,
    "CERT_RENDER_DEADLINE": DEFAULT_RENDER_DEADLINE_SECONDS,
    "CERT_FONT_DIR": DEFAULT_FONT_DIR,
}


def create_app(config=None):
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = 2 * 1024 * 1024
    for key, default in _CONFIG_DEFAULTS.items():
        app.config[key] = os.getenv(key, default)
    if config:
        app.config.update(config)

    # web payloads may only reference data: and http(s) images
    host = RenderHost(
        RenderSettings.from_mapping(app.config), image_loader=ImageLoader()
    )
    app.extensions["render_host"] = host
    atexit.register(host.close)

    @app.get("/health")
    def health():  # pragma: no cover - simple healthcheck
        return "OK", 200

    from .routes.certificates import bp as certificates_bp

    app.register_blueprint(certificates_bp)
    return app
