"""
Conversion of legacy upper-case listing records into the canonical listing shape.

Legacy sample data uses keys such as ``TITLE``, ``PRICE``, ``LATITUDE`` and a
nested ``owner.email``. This module is the only place those keys are read.
"""

from typing import Any, Dict, Mapping, Optional

# Legacy key -> canonical field
FIELD_MAP = {
    "TITLE": "title",
    "DESCRIPTION": "description",
    "PRICE": "price",
    "ADDRESS": "location_text",
    "BEDROOMS": "bedrooms",
    "BATHROOMS": "bathrooms",
    "AREA_SQFT": "area",
    "FURNISHED": "furnishing",
    "CATEGORY": "property_type",
    "AVAILABLE_UNITS": "available_units",
    "DEPOSIT": "deposit_amount",
    "AVAILABLE_FOR": "available_for",
}

FURNISHING_ALIASES = {
    "furnished": "Furnished",
    "fully-furnished": "Furnished",
    "semi-furnished": "Semi-furnished",
    "semifurnished": "Semi-furnished",
    "unfurnished": "Unfurnished",
}


def is_legacy_record(record: Mapping[str, Any]) -> bool:
    """Whether a record uses the upper-case legacy keys."""
    return "TITLE" in record or "LISTING_ID" in record


def normalize_furnishing(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    key = value.strip().lower().replace(" ", "-")
    return FURNISHING_ALIASES.get(key, value.strip())


def _owner_email(record: Mapping[str, Any]) -> Optional[str]:
    owner = record.get("owner")
    if isinstance(owner, Mapping) and owner.get("email"):
        return str(owner["email"]).strip().lower()
    if record.get("OWNER_EMAIL"):
        return str(record["OWNER_EMAIL"]).strip().lower()
    return None


def from_legacy_listing(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert one legacy record to canonical listing input.

    Returns:
        Dictionary accepted by ``ListingCreate`` plus a ``verified`` flag
    """
    canonical: Dict[str, Any] = {}
    for legacy_key, field in FIELD_MAP.items():
        if record.get(legacy_key) is not None:
            canonical[field] = record[legacy_key]

    if "furnishing" in canonical:
        canonical["furnishing"] = normalize_furnishing(canonical["furnishing"])

    # Legacy "location" is a neighbourhood description, kept when there is no address
    if "location_text" not in canonical and isinstance(record.get("location"), str):
        canonical["location_text"] = record["location"]

    latitude = record.get("LATITUDE")
    longitude = record.get("LONGITUDE")
    if latitude is not None and longitude is not None:
        canonical["location"] = {
            "type": "Point",
            "coordinates": [float(longitude), float(latitude)],
        }

    images = record.get("IMAGES")
    if isinstance(images, list):
        canonical["images"] = [str(url) for url in images]
    elif record.get("IMAGE_URL"):
        canonical["images"] = [record["IMAGE_URL"]]

    if record.get("status"):
        canonical["status"] = str(record["status"]).lower()

    owner_email = _owner_email(record)
    if owner_email:
        canonical["owner_email"] = owner_email

    canonical["verified"] = bool(record.get("VERIFIED", False))
    return canonical


def to_canonical(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Canonical listing input from either a legacy or an already canonical record."""
    if is_legacy_record(record):
        return from_legacy_listing(record)
    return dict(record)
