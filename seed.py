"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 2 sample customers
  - 8 sample medicines across five categories
  - 8 sample pharmacies (six around Bangalore, two in the US, one inactive)
"""

import asyncio

from sqlalchemy import text
from geoalchemy2.functions import ST_MakePoint, ST_SetSRID

from medifly.infrastructure.database import async_session_factory, engine
from medifly.infrastructure.models import MedicineModel, PharmacyModel, UserModel


USERS = [
    {"name": "Aarav Sharma", "email": "aarav@example.com", "phone": "+91-98450-12345",
     "address": "12 MG Road", "city": "Bengaluru", "state": "KA", "zip_code": "560001"},
    {"name": "Priya Patel", "email": "priya@example.com", "phone": "+91-98860-67890",
     "address": "44 Indiranagar 100ft Rd", "city": "Bengaluru", "state": "KA", "zip_code": "560038"},
]

MEDICINES = [
    {"name": "Paracetamol 500mg", "description": "Pain reliever and fever reducer",
     "category": "Pain Relief", "price": 5.99, "requires_prescription": False,
     "manufacturer": "PharmaCorp", "dosage": "500mg", "quantity": 100},
    {"name": "Amoxicillin 250mg", "description": "Antibiotic for bacterial infections",
     "category": "Antibiotics", "price": 12.99, "requires_prescription": True,
     "manufacturer": "MediPharm", "dosage": "250mg", "quantity": 50},
    {"name": "Ibuprofen 400mg", "description": "Anti-inflammatory pain reliever",
     "category": "Pain Relief", "price": 8.99, "requires_prescription": False,
     "manufacturer": "HealthPlus", "dosage": "400mg", "quantity": 75},
    {"name": "Cetirizine 10mg", "description": "Antihistamine for allergies",
     "category": "Allergy", "price": 9.99, "requires_prescription": False,
     "manufacturer": "AllergyFree", "dosage": "10mg", "quantity": 60},
    {"name": "Omeprazole 20mg", "description": "Proton pump inhibitor for acid reflux",
     "category": "Digestive Health", "price": 15.99, "requires_prescription": True,
     "manufacturer": "GastroMed", "dosage": "20mg", "quantity": 40},
    {"name": "Loratadine 10mg", "description": "Non-drowsy allergy relief",
     "category": "Allergy", "price": 7.49, "requires_prescription": False,
     "manufacturer": "AllergyFree", "dosage": "10mg", "quantity": 80},
    {"name": "Oral Rehydration Salts", "description": "Electrolyte replacement for dehydration",
     "category": "Digestive Health", "price": 2.99, "requires_prescription": False,
     "manufacturer": "HydraLife", "dosage": "21g sachet", "quantity": 200},
    {"name": "Vitamin D3 1000IU", "description": "Bone and immune health supplement",
     "category": "Vitamins", "price": 6.49, "requires_prescription": False,
     "manufacturer": "SunWell", "dosage": "1000IU", "quantity": 0, "in_stock": False},
]

PHARMACIES = [
    {"name": "MG Road Pharmacy", "address": "1 MG Road", "city": "Bengaluru", "state": "KA",
     "zip_code": "560001", "phone": "+91-80-4110-2200", "lat": 12.9756, "lng": 77.6050},
    {"name": "Indiranagar Health Store", "address": "88 100ft Road, Indiranagar",
     "city": "Bengaluru", "state": "KA", "zip_code": "560038", "phone": "+91-80-4220-3300",
     "lat": 12.9784, "lng": 77.6408},
    {"name": "Koramangala MedPlus", "address": "5th Block, Koramangala", "city": "Bengaluru",
     "state": "KA", "zip_code": "560095", "phone": "+91-80-4330-4400",
     "lat": 12.9352, "lng": 77.6245, "rating": 4.2},
    {"name": "Jayanagar Apollo Pharmacy", "address": "11th Main, Jayanagar 4th Block",
     "city": "Bengaluru", "state": "KA", "zip_code": "560011", "phone": "+91-80-4440-5500",
     "lat": 12.9250, "lng": 77.5938, "rating": 4.8},
    {"name": "Whitefield Care Chemists", "address": "ITPL Main Road, Whitefield",
     "city": "Bengaluru", "state": "KA", "zip_code": "560066", "phone": "+91-80-4550-6600",
     "lat": 12.9698, "lng": 77.7500, "open_hours": "8:00 - 22:00"},
    {"name": "Hebbal Night Pharmacy", "address": "Outer Ring Road, Hebbal",
     "city": "Bengaluru", "state": "KA", "zip_code": "560024", "phone": "+91-80-4660-7700",
     "lat": 13.0358, "lng": 77.5970, "is_active": False},
    {"name": "Central Pharmacy", "address": "123 Main St", "city": "New York", "state": "NY",
     "zip_code": "10001", "phone": "+1-212-555-0100", "lat": 40.7128, "lng": -74.0060},
    {"name": "HealthCare Pharmacy", "address": "456 Oak Ave", "city": "Los Angeles",
     "state": "CA", "zip_code": "90001", "phone": "+1-213-555-0200",
     "lat": 34.0522, "lng": -118.2437},
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM medicines"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        for u in USERS:
            session.add(UserModel(**u))

        # ── Medicines ─────────────────────────────────────────────────
        for m in MEDICINES:
            session.add(MedicineModel(image_url="", **{"in_stock": True, **m}))

        # ── Pharmacies ────────────────────────────────────────────────
        for p in PHARMACIES:
            data = dict(p)
            lat, lng = data.pop("lat"), data.pop("lng")
            session.add(
                PharmacyModel(
                    latitude=lat,
                    longitude=lng,
                    location=ST_SetSRID(ST_MakePoint(lng, lat), 4326),
                    **{"is_active": True, **data},
                )
            )

        await session.commit()
        print(
            f"Seeded {len(USERS)} users, {len(MEDICINES)} medicines, "
            f"{len(PHARMACIES)} pharmacies."
        )

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
