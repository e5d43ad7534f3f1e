#!/usr/bin/env python3
"""Seed the database with a sample decoration catalogue."""
import sys
from pathlib import Path

# Add the parent directory to the path so we can import the app
sys.path.insert(0, str(Path(__file__).parent.parent))

from styledecor import create_app
from styledecor.extensions import db
from styledecor.models import Service

SAMPLE_SERVICES = [
    {
        "service_name": "Wedding Stage Decoration",
        "service_category": "wedding",
        "cost": 1500.0,
        "unit": "per event",
        "description": "Floral stage, backdrop and lighting for the ceremony",
    },
    {
        "service_name": "Birthday Balloon Setup",
        "service_category": "birthday",
        "cost": 120.0,
        "unit": "per room",
        "description": "Balloon arch, table centrepieces and banner",
    },
    {
        "service_name": "Living Room Makeover",
        "service_category": "home",
        "cost": 45.0,
        "unit": "per sq-ft",
        "description": "Furniture layout, curtains and accent decor",
    },
    {
        "service_name": "Office Event Styling",
        "service_category": "office",
        "cost": 600.0,
        "unit": "per event",
        "description": "Branded decor for launches and corporate parties",
    },
    {
        "service_name": "Festival Lighting",
        "service_category": "seminar",
        "cost": 300.0,
        "unit": "per venue",
        "description": "String lights, lanterns and outdoor fixtures",
    },
]


def seed_services():
    """Add the sample services that are not present yet."""
    app = create_app()

    with app.app_context():
        added = 0
        for data in SAMPLE_SERVICES:
            if Service.query.filter_by(service_name=data["service_name"]).first():
                continue
            db.session.add(Service(**data))
            added += 1

        db.session.commit()
        print(f"✅ Added {added} services ({len(SAMPLE_SERVICES) - added} already present)")


if __name__ == "__main__":
    seed_services()
