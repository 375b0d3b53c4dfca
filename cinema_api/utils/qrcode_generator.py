import logging
import os
from typing import Optional

import qrcode

from cinema_api.utils.config import settings

logger = logging.getLogger(__name__)


def generate_qr_code(name: str, text: str, directory: Optional[str] = None) -> Optional[str]:
    """Write a PNG QR code for `text` as `<directory>/<name>`.

    Returns the file name on success and None when the image could not be
    produced or written.
    """
    target_dir = directory or settings.FILE_GENERATED_PATH
    try:
        os.makedirs(target_dir, exist_ok=True)
        qr = qrcode.QRCode(version=1, box_size=10, border=4)
        qr.add_data(text)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        img.save(os.path.join(target_dir, name))
    except (OSError, ValueError) as e:
        logger.warning("qrcode.failed name=%s error=%s: %s", name, type(e).__name__, e)
        return None
    return name
