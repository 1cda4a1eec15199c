DEFAULT_BRAND = "Saarthix"

# Logical document size, roughly A4 landscape at 96 dpi.
CERT_WIDTH = 1122
CERT_HEIGHT = 794

DEFAULT_RANK_TITLE = "Participation Certificate"
DEFAULT_CERTIFICATE_TYPE = "Certificate of Participation"

DEFAULT_LEFT_SIGNER_NAME = "Platform Director"
DEFAULT_RIGHT_SIGNER_NAME = "Event Organizer"

DEFAULT_RASTER_SCALE = 2.0
MIN_RASTER_SCALE = 1.0
MAX_RASTER_SCALE = 4.0
DEFAULT_IMAGE_TIMEOUT_SECONDS = 3.0
DEFAULT_FONT_TIMEOUT_SECONDS = 5.0
DEFAULT_SETTLE_DELAY_SECONDS = 1.0
DEFAULT_RENDER_DEADLINE_SECONDS = 30.0
DEFAULT_FONT_DIR = "/usr/share/fonts/truetype/dejavu"
