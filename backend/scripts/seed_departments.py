#!/usr/bin/env python3
"""
Seed the department directory for Greater Noida.

Clears existing departments (and their service areas) and inserts them in
a fixed order. Insertion order is directory order, which routing uses to
break ties, so keep this list ordered deliberately.
"""

import asyncio
import json
import os
import sys

import asyncpg
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "").replace("+asyncpg", "").replace("postgresql://", "postgres://")

# center is [lng, lat]; an empty list means city-wide jurisdiction
DEPARTMENTS = [
    {
        "name": "Public Works Department (PWD)",
        "categories": ["pothole", "streetlight"],
        "service_areas": [{"center": [77.51, 28.46], "radius_meters": 5000}],  # Pari Chowk
    },
    {
        "name": "Health & Sanitation Department",
        "categories": ["garbage"],
        "service_areas": [{"center": [77.50, 28.47], "radius_meters": 3500}],  # Alpha/Beta sectors
    },
    {
        "name": "Horticulture Department",
        "categories": ["tree"],
        "service_areas": [],
    },
    {
        "name": "Water Department (Jal Vibhag)",
        "categories": ["water"],
        "service_areas": [{"center": [77.49, 28.48], "radius_meters": 4500}],  # Knowledge Park
    },
]


def log(msg):
    """Print with flush for immediate output."""
    print(msg, flush=True)


async def seed():
    if not DATABASE_URL:
        log("Error: DATABASE_URL is not set")
        sys.exit(1)

    log("Connecting to database...")
    conn = await asyncpg.connect(DATABASE_URL)

    try:
        async with conn.transaction():
            deleted = await conn.execute("DELETE FROM departments")
            log(f"Previous departments removed ({deleted})")

            for dept in DEPARTMENTS:
                dept_id = await conn.fetchval(
                    "INSERT INTO departments (name, categories) VALUES ($1, $2::json) RETURNING id",
                    dept["name"],
                    json.dumps(dept["categories"]),
                )
                for position, area in enumerate(dept["service_areas"]):
                    lng, lat = area["center"]
                    await conn.execute(
                        "INSERT INTO service_areas "
                        "(department_id, position, center_longitude, center_latitude, radius_meters) "
                        "VALUES ($1, $2, $3, $4, $5)",
                        dept_id,
                        position,
                        lng,
                        lat,
                        area["radius_meters"],
                    )
                log(f"  {dept_id}: {dept['name']} ({len(dept['service_areas'])} service areas)")

        log(f"\nSeeded {len(DEPARTMENTS)} departments")
    finally:
        await conn.close()
        log("Connection closed")


if __name__ == "__main__":
    asyncio.run(seed())
