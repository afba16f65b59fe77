"""
Stage 1: Phone Geolocation
==========================
Infer a prospect's country from a raw phone string.

Lookup order:
- NANP (leading "1" + three digit area code)
- International calling codes, longest prefix first (3, 2, 1 digits)
- "Unknown"
"""

import re
from typing import Mapping, Optional

from ..config.calling_codes import (
    NANP_AREA_CODES,
    CALLING_CODES,
    UNKNOWN_COUNTRY,
    NANP_DEFAULT_COUNTRY,
)

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_phone(phone: Optional[str]) -> str:
    """Digits only, leading zeros stripped. None/empty -> ''."""
    if not phone:
        return ""
    return _NON_DIGITS.sub("", str(phone)).lstrip("0")


class PhoneGeolocator:
    """
    Stage 1: Map phone numbers to countries using static lookup tables.
    """

    def __init__(
        self,
        area_codes: Optional[Mapping[str, str]] = None,
        calling_codes: Optional[Mapping[str, str]] = None,
    ):
        self.area_codes = area_codes if area_codes is not None else NANP_AREA_CODES
        self.calling_codes = calling_codes if calling_codes is not None else CALLING_CODES

    def lookup_area_code(self, area_code: str) -> Optional[str]:
        return self.area_codes.get(area_code)

    def lookup_calling_code(self, prefix: str) -> Optional[str]:
        return self.calling_codes.get(prefix)

    def detect(self, phone: Optional[str]) -> str:
        """
        Detect the country for a phone number.

        Args:
            phone: Raw phone string in any format

        Returns:
            Country name, or "Unknown" when nothing matches
        """
        digits = normalize_phone(phone)
        if not digits:
            return UNKNOWN_COUNTRY

        # NANP numbers (1 + area code)
        if digits.startswith("1") and len(digits) >= 4:
            country = self.lookup_area_code(digits[1:4])
            if country:
                return country
            if len(digits) == 11:
                return NANP_DEFAULT_COUNTRY

        for code_len in (3, 2, 1):
            if len(digits) >= code_len:
                country = self.lookup_calling_code(digits[:code_len])
                if country:
                    return country

        return UNKNOWN_COUNTRY

    # Alias matching the other stages
    process = detect


_default_geolocator = PhoneGeolocator()


def detect_country_from_phone(phone: Optional[str]) -> str:
    """Module-level shortcut using the bundled lookup tables."""
    return _default_geolocator.detect(phone)
