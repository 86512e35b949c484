"""
Seed script -- populates the SQL database with the demo fleet and route
network.

Run after migrations:
    python seed.py

Creates:
  - 5 vehicles (Economic, Standard, Premium, Luxury, SUV)
  - 18 directed route edges (9 bidirectional connections over A-F)
"""

import asyncio

from cabroute.config import settings
from cabroute.infrastructure.database import create_engine, create_session_factory
from cabroute.infrastructure.seed_data import CONNECTIONS, VEHICLES, seed
from cabroute.infrastructure.unit_of_work import SqlUnitOfWork


async def main():
    print("Seeding database...")
    engine = create_engine(settings.database_url)
    try:
        async with SqlUnitOfWork(create_session_factory(engine)) as uow:
            if await seed(uow):
                print(f"  Created {len(VEHICLES)} vehicles")
                print(f"  Created {len(CONNECTIONS) * 2} route edges")
                print("\nSeed complete!")
            else:
                print("Database already seeded. Skipping.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
