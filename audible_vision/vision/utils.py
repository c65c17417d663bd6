import warnings
from contextlib import contextmanager
from io import BytesIO
from pathlib import Path
from threading import Lock
from typing import Optional

from PIL import Image, UnidentifiedImageError

# Formats accepted by the Image Analysis service
SUPPORTED_FORMATS = {"JPEG", "PNG", "GIF", "BMP", "WEBP", "ICO", "TIFF", "MPO"}

MIN_DIMENSION = 50
MAX_DIMENSION = 16000

# Pillow's pixel limit is process-wide; serialize the temporary override
_pixel_limit_lock = Lock()

_EXTENSION_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
    ".bmp": "BMP",
    ".webp": "WEBP",
    ".ico": "ICO",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".mpo": "MPO",
}


def format_from_file_name(file_name: Optional[str]) -> Optional[str]:
    """Guess an image format from a file name's extension."""
    if not file_name:
        return None
    return _EXTENSION_FORMATS.get(Path(file_name).suffix.lower())


@contextmanager
def _service_size_limit():
    """Allow Pillow to open headers of images up to the service's maximum size."""
    with _pixel_limit_lock, warnings.catch_warnings():
        warnings.simplefilter("ignore", Image.DecompressionBombWarning)
        previous = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = MAX_DIMENSION * MAX_DIMENSION
        try:
            yield
        finally:
            Image.MAX_IMAGE_PIXELS = previous


def validate_image(image_data: bytes, file_name: Optional[str] = None) -> str:
    """
    Check that image bytes are something the vision service will accept.

    Args:
        image_data: Raw image bytes
        file_name: File name hint, used when the format cannot be detected

    Returns:
        The detected image format name (e.g. "JPEG")

    Raises:
        ValueError: If the image is empty, of an unsupported format, or
            outside the accepted dimensions
    """
    if not image_data:
        raise ValueError(f"Image {file_name or '<stream>'} is empty")

    try:
        with _service_size_limit(), Image.open(BytesIO(image_data)) as img:
            image_format = img.format or format_from_file_name(file_name)
            width, height = img.size
    except Image.DecompressionBombError as e:
        raise ValueError(f"Invalid image dimensions: {str(e)}")
    except UnidentifiedImageError:
        image_format = format_from_file_name(file_name)
        if not image_format:
            raise ValueError(f"Unrecognized image format: {file_name or '<stream>'}")
        # Pillow can't decode it; leave the size check to the service
        return image_format

    if image_format not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported image format: {image_format}")

    if (width < MIN_DIMENSION or height < MIN_DIMENSION
            or width > MAX_DIMENSION or height > MAX_DIMENSION):
        raise ValueError(f"Invalid image dimensions: {width}x{height}")

    return image_format
