"""Utility functions for the EventGate platform."""

import re
import secrets
from io import BytesIO

import qrcode


def initials(text, max_letters=4):
    """Upper-case initials of the words in text, e.g. 'Baptist Youth Conference' -> 'BYC'."""
    words = re.findall(r'[A-Za-z0-9]+', text or '')
    letters = ''.join(word[0] for word in words).upper()
    return letters[:max_letters] or 'EV'


def random_digits(length=4):
    """Return a zero-padded random numeric string."""
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def generate_qr_code(data, size=10):
    """Generate a QR code PNG from the given data and return its bytes."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=size,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")

    return buffer.getvalue()
