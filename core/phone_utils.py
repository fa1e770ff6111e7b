"""
Canonical phone number utilities for the EventGate platform.
Storage: always use normalized international form (233XXXXXXXXX) for matching
and for the mobile-money payer field.
Display: use format_phone_display for UI/API responses.
"""

import re

GHANA_COUNTRY_CODE = '233'

_SEPARATORS = re.compile(r'[\s\-().]')
_GHANA_INTERNATIONAL = re.compile(r'^233\d{9}$')


def normalize_ghana_phone(raw: str) -> str:
    """
    Normalize a Ghana phone number to the 12-digit international form.

    Accepts local numbers ('024 123 4567'), '+233...' and '233...' forms.

    Args:
        raw: Raw phone string

    Returns:
        '233XXXXXXXXX', or empty string if the number is not a valid Ghana number
    """
    if not raw or not isinstance(raw, str):
        return ''
    cleaned = _SEPARATORS.sub('', raw.strip())
    if cleaned.startswith('+'):
        cleaned = cleaned[1:]
    if cleaned.startswith('0') and len(cleaned) == 10:
        cleaned = GHANA_COUNTRY_CODE + cleaned[1:]
    if _GHANA_INTERNATIONAL.match(cleaned):
        return cleaned
    return ''


def format_phone_display(raw: str) -> str:
    """
    Format phone for display (e.g. '+233 24 123 4567').

    Args:
        raw: Raw or normalized phone string

    Returns:
        Formatted string for display, or original if can't format
    """
    norm = normalize_ghana_phone(raw)
    if not norm:
        return raw or ''
    return f"+{norm[:3]} {norm[3:5]} {norm[5:8]} {norm[8:]}"
