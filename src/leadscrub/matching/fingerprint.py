"""Prefix fingerprints for suppression lookups.

A fingerprint is two keys built from the leading characters of first name,
last name and company name, concatenated in that order with no separator.
Short fields contribute whatever characters they have; nothing is padded.
"""

from __future__ import annotations

from leadscrub.core.types import CellValue
from leadscrub.models.matching import Fingerprint, IdentityFields

SHORT_PREFIX = 3
LONG_PREFIX = 4


def normalize(value: CellValue) -> str:
    """Trim a raw cell value; absent values become the empty string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _prefix_key(first_name: str, last_name: str, company_name: str, size: int) -> str:
    return f"{first_name[:size]}{last_name[:size]}{company_name[:size]}"


def fingerprint(first_name: str, last_name: str, company_name: str) -> Fingerprint:
    return Fingerprint(
        key3=_prefix_key(first_name, last_name, company_name, SHORT_PREFIX),
        key4=_prefix_key(first_name, last_name, company_name, LONG_PREFIX),
    )


def identity_fingerprint(identity: IdentityFields) -> Fingerprint:
    return fingerprint(identity.first_name, identity.last_name, identity.company_name)
