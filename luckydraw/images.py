import base64
import mimetypes

from . import config
from .errors import ValidationError


def image_to_data_url(file, limit=config.MAX_IMAGE_BYTES):
    """Turn an uploaded image into a base64 `data:` URL.

    `file` is a werkzeug FileStorage (or anything with read/filename/mimetype).
    """
    mimetype = getattr(file, 'mimetype', None) or mimetypes.guess_type(file.filename or '')[0] or ''
    if not mimetype.startswith('image/'):
        raise ValidationError("Only image files can be used here.")

    # read one byte past the limit so oversize files are caught without loading them whole
    data = file.read(limit + 1)
    if len(data) > limit:
        raise ValidationError(f"Image files cannot be larger than {limit // (1024 * 1024)}MB.")
    if not data:
        raise ValidationError("The image file is empty.")

    encoded = base64.b64encode(data).decode('ascii')
    return f"data:{mimetype};base64,{encoded}"
