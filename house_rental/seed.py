"""
Seed the database with sample listings and an optional admin account.

Usage:
    python -m house_rental.seed sample_data/sample_listings.json
    python -m house_rental.seed listings.json --admin-email admin@example.com --admin-password secret123
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from house_rental.database import AsyncSessionLocal, create_tables
from house_rental.models.user import UserRole
from house_rental.repositories.listing import ListingRepository
from house_rental.repositories.user import UserRepository
from house_rental.schemas.listing import ListingCreate
from house_rental.utils.legacy import to_canonical

logger = logging.getLogger(__name__)


def load_records(path: Path) -> List[Dict[str, Any]]:
    """Read a JSON array of listing records."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of listings")
    return data


async def seed_listings(session: AsyncSession, records: List[Dict[str, Any]]) -> int:
    """
    Insert listings, skipping any whose title and owner email already exist.

    Records may be legacy or canonical. Owners are linked by email when a
    matching account exists.

    Returns:
        Number of listings inserted
    """
    listing_repo = ListingRepository(session)
    user_repo = UserRepository(session)

    rows = []
    for record in records:
        canonical = to_canonical(record)
        verified = bool(canonical.pop("verified", False))
        listing_data = ListingCreate.model_validate(canonical)

        if not listing_data.owner_email:
            logger.warning(f"Skipping '{listing_data.title}': no owner email")
            continue

        if await listing_repo.count({"title": listing_data.title, "owner_email": listing_data.owner_email}):
            logger.info(f"Listing '{listing_data.title}' already exists, skipping")
            continue

        owner = await user_repo.get_by_email(listing_data.owner_email)
        latitude, longitude = listing_data.resolve_coordinates()

        row = listing_data.model_dump(exclude={"lat", "lng", "location"})
        row.update({
            "latitude": latitude,
            "longitude": longitude,
            "owner_id": owner.id if owner else None,
            "verified": verified,
        })
        rows.append(row)

    if rows:
        await listing_repo.bulk_create(rows)
    logger.info(f"Seeded {len(rows)} listings")
    return len(rows)


async def ensure_admin(session: AsyncSession, email: str, password: str, name: str = "Administrator") -> bool:
    """Create an admin account unless the email is taken. Returns True when created."""
    user_repo = UserRepository(session)
    if await user_repo.get_by_email(email):
        logger.info("Admin user already exists, skipping")
        return False

    await user_repo.create_user({
        "name": name,
        "email": email,
        "password": password,
        "role": UserRole.ADMIN,
    })
    logger.info(f"Admin user created: {email}")
    logger.warning("Please change the admin password in production!")
    return True


async def run(path: Path, admin_email: Optional[str], admin_password: Optional[str]) -> None:
    await create_tables()
    async with AsyncSessionLocal() as session:
        if admin_email and admin_password:
            await ensure_admin(session, admin_email, admin_password)
        await seed_listings(session, load_records(path))


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    parser = argparse.ArgumentParser(description="Seed the house rental database")
    parser.add_argument(
        "path",
        nargs="?",
        default="sample_data/sample_listings.json",
        type=Path,
        help="JSON file with an array of listings (legacy or canonical shape)"
    )
    parser.add_argument("--admin-email", help="Create an admin account with this email")
    parser.add_argument("--admin-password", help="Password for the admin account")
    args = parser.parse_args(argv)

    if bool(args.admin_email) != bool(args.admin_password):
        parser.error("--admin-email and --admin-password must be given together")

    asyncio.run(run(args.path, args.admin_email, args.admin_password))


if __name__ == "__main__":
    main()
