#!/usr/bin/env python3
"""
Database Seeder
Inserts sample branches, gallery images and enquiries for local development.
Run after `alembic upgrade head`, or pass --create-tables to build the schema
directly from the models (handy with SQLite).
"""
import argparse
import asyncio

from hostel_api.database import AsyncSessionLocal, Base, close_db, engine
from hostel_api.schemas import BranchCreate, EnquiryCreate
from hostel_api.services import branch_service, enquiry_service, gallery_service


SAMPLE_BRANCHES = [
    {
        "name": "Nyxta Downtown Branch",
        "contact_no": ["+91-9876543210", "+91-9876543211"],
        "address": "123 MG Road, Bangalore, Karnataka 560001",
        "gmap_link": "https://maps.google.com/?q=12.9716,77.5946",
        "room_rate": [
            {"title": "Single Occupancy", "rate_per_month": 8000},
            {"title": "Double Occupancy", "rate_per_month": 6000},
            {"title": "Triple Occupancy", "rate_per_month": 5000},
        ],
        "prime_location_perks": [
            {"title": "Metro Station", "distance": "500m", "time_to_reach": "5 mins"},
            {"title": "Shopping Mall", "distance": "1km", "time_to_reach": "10 mins"},
            {"title": "Tech Park", "distance": "2km", "time_to_reach": "15 mins"},
        ],
        "amenities": ["WiFi", "AC Rooms", "Laundry", "Gym", "Power Backup", "CCTV"],
        "property_features": ["Attached Bathroom", "Study Table", "Wardrobe", "Security Guard", "Parking"],
        "reg_fee": 2000,
        "is_mess_available": True,
        "display_order": 1,
    },
    {
        "name": "Nyxta Tech Park Branch",
        "contact_no": ["+91-9876543220"],
        "address": "456 Whitefield Road, Bangalore, Karnataka 560066",
        "gmap_link": "https://maps.google.com/?q=12.9698,77.7499",
        "room_rate": [
            {"title": "Single Occupancy", "rate_per_month": 9000},
            {"title": "Double Occupancy", "rate_per_month": 7000},
        ],
        "prime_location_perks": [
            {"title": "IT Companies", "distance": "800m", "time_to_reach": "8 mins"},
            {"title": "Food Court", "distance": "300m", "time_to_reach": "3 mins"},
        ],
        "amenities": ["WiFi", "AC Rooms", "Laundry", "Power Backup", "Common Room"],
        "property_features": ["Attached Bathroom", "Study Table", "Wardrobe", "Security Guard"],
        "reg_fee": 2500,
        "is_mess_available": False,
        "display_order": 2,
    },
]

# (branch index, image values)
SAMPLE_IMAGES = [
    (0, {
        "image_url": "https://images.unsplash.com/photo-1555854877-bab0e564b8d5",
        "title": "Spacious Room View",
        "description": "Modern and well-furnished single occupancy room",
        "tags": ["room", "single", "modern"],
        "display_order": 1,
    }),
    (0, {
        "image_url": "https://images.unsplash.com/photo-1522771739844-6a9f6d5f14af",
        "title": "Common Area",
        "description": "Comfortable common area for residents",
        "tags": ["common-area", "lounge"],
        "display_order": 2,
    }),
    (1, {
        "image_url": "https://images.unsplash.com/photo-1540518614846-7eded433c457",
        "title": "Study Room",
        "description": "Quiet study room with high-speed WiFi",
        "tags": ["study", "quiet", "wifi"],
        "display_order": 1,
    }),
]

# (branch index or None, enquiry values)
SAMPLE_ENQUIRIES = [
    (0, {
        "name": "Rahul Kumar",
        "email": "rahul.kumar@example.com",
        "phone": "+91-9876543230",
        "message": "I am interested in single occupancy room at Downtown branch",
        "source": "website",
    }),
    (1, {
        "name": "Priya Sharma",
        "email": "priya.sharma@example.com",
        "phone": "+91-9876543240",
        "message": "Can you provide more details about amenities?",
        "source": "cta",
    }),
    (None, {
        "name": "Amit Patel",
        "email": "amit.patel@example.com",
        "phone": "+91-9876543250",
        "message": "General enquiry about availability",
        "source": "website",
    }),
]


async def seed(create_tables: bool) -> None:
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        print("Created tables from models")

    async with AsyncSessionLocal() as db:
        branches = [
            await branch_service.create_branch(db, BranchCreate(**values))
            for values in SAMPLE_BRANCHES
        ]
        print(f"✅ Inserted {len(branches)} branches")

        images = [
            await gallery_service.create_image(db, {"branch_id": branches[index].id, **values})
            for index, values in SAMPLE_IMAGES
        ]
        print(f"✅ Inserted {len(images)} gallery images")

        enquiries = [
            await enquiry_service.create_enquiry(
                db,
                EnquiryCreate(branch_id=branches[index].id if index is not None else None, **values),
            )
            for index, values in SAMPLE_ENQUIRIES
        ]
        print(f"✅ Inserted {len(enquiries)} enquiries")

    await close_db()


def main():
    parser = argparse.ArgumentParser(description="Insert sample data into the database")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables from the models before seeding (skip when using Alembic)",
    )
    args = parser.parse_args()

    print("=" * 60)
    print("Seeding database...")
    print("=" * 60)

    asyncio.run(seed(args.create_tables))

    print("\n🎉 Database seeding completed successfully!")


if __name__ == "__main__":
    main()
