"""Create database schema and seed sample apartments for development."""
from __future__ import annotations

import asyncio

from apartments.core.config import settings
from apartments.core.errors import DuplicateIdentifier
from apartments.core.identity import CallContext
from apartments.core.logs import configure_logging
from apartments.db.session import SessionLocal, create_schema
from apartments.schemas import apartments as schemas
from apartments.services import lifecycle, registry

APARTMENTS = [
	{"apartment_number": 101, "owner": "owner-alice", "rent_price": 1_200},
	{"apartment_number": 102, "owner": "owner-alice", "sale_price": 250_000},
	{"apartment_number": 201, "owner": "owner-bilal"},
	{"apartment_number": 202, "owner": "owner-bilal", "rent_price": 950},
]


async def seed_apartments() -> None:
	"""Register demo apartments and open their listings, skipping ones already present."""

	for data in APARTMENTS:
		number = data["apartment_number"]
		owner = CallContext(caller=data["owner"])

		async with SessionLocal() as session:
			try:
				await registry.register(schemas.ApartmentCreateRequest(apartment_number=number), owner, session)
			except DuplicateIdentifier:
				continue

		if "rent_price" in data:
			async with SessionLocal() as session:
				await lifecycle.list_for_rent(
					number, schemas.ListingRequest(price=data["rent_price"]), owner, session
				)
		elif "sale_price" in data:
			async with SessionLocal() as session:
				await lifecycle.list_for_sale(
					number, schemas.ListingRequest(price=data["sale_price"]), owner, session
				)


async def main() -> None:
	configure_logging(settings.log_level)
	await create_schema()
	await seed_apartments()
	print("Database schema ensured and demo apartments seeded.")


if __name__ == "__main__":
	asyncio.run(main())
