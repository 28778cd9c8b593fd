STANDARD_EXTENSIONS = {".jpg", ".jpeg", ".png", ".tif", ".tiff", ".webp"}
HEIF_EXTENSIONS = {".heic", ".heif", ".hif"}
SUPPORTED_EXTENSIONS = STANDARD_EXTENSIONS | HEIF_EXTENSIONS

# Placeholder for any metadata field that could not be determined
UNKNOWN = "unknown"

TEMPLATE_CLASSIC = "classic"
TEMPLATE_BLUR_BACKGROUND = "blur-background"
VALID_TEMPLATES = (TEMPLATE_CLASSIC, TEMPLATE_BLUR_BACKGROUND)
DEFAULT_TEMPLATE = TEMPLATE_CLASSIC

TEMPLATE_DESCRIPTIONS = {
    TEMPLATE_CLASSIC: "White canvas, centered photo, caption band below.",
    TEMPLATE_BLUR_BACKGROUND: "Blurred photo backdrop, framed photo, shadowed white caption.",
}

# Fixed compositing order per template, bottom layer first
CLASSIC_STACK = ("base", "photo", "text")
BLUR_BACKGROUND_STACK = ("background", "scrim", "photo", "text")

OUTPUT_FORMATS = {
    "jpg": ("JPEG", "image/jpeg", "jpg"),
    "jpeg": ("JPEG", "image/jpeg", "jpg"),
    "png": ("PNG", "image/png", "png"),
}

TEXT_BACKENDS = {"pillow", "svg"}
