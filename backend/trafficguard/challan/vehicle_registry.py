"""
Mock Vehicle Registry

Simulates the government RTO lookup API. Three seeded records cover the
interesting cases (expired insurance, stolen vehicle, every document
expired); any other plate gets a generic record with randomised document
statuses so the demo keeps flowing.
"""

import asyncio
import random
import re
from typing import Dict, Optional

from trafficguard.models import (
    VehicleDocuments,
    VehicleOwner,
    VehicleRecord,
)


SEEDED_VEHICLES: Dict[str, VehicleRecord] = {
    'MH12DE1433': VehicleRecord(
        plate_number='MH12DE1433',
        model='Honda City',
        type='Four Wheeler',
        is_stolen=False,
        owner=VehicleOwner(
            name='Rajesh Kumar',
            email='rajesh.k@example.com',
            phone='+919876543210',
            address='Flat 402, Sunshine Apartments, Pune',
        ),
        documents=VehicleDocuments(
            rc_status='Active', rc_expiry='2028-05-20',
            insurance_status='Expired', insurance_expiry='2023-12-01',
            puc_status='Active', puc_expiry='2024-10-15',
        ),
    ),
    'DL3CA1234': VehicleRecord(
        plate_number='DL3CA1234',
        model='Maruti Swift',
        type='Four Wheeler',
        is_stolen=True,
        owner=VehicleOwner(
            name='Vikram Singh',
            email='vikram.singh@example.com',
            phone='+919988776655',
            address='12, Civil Lines, Delhi',
        ),
        documents=VehicleDocuments(
            rc_status='Active', rc_expiry='2026-01-01',
            insurance_status='Active', insurance_expiry='2025-01-01',
            puc_status='Active', puc_expiry='2025-02-01',
        ),
    ),
    'KA05JA9999': VehicleRecord(
        plate_number='KA05JA9999',
        model='Royal Enfield Classic 350',
        type='Two Wheeler',
        is_stolen=False,
        owner=VehicleOwner(
            name='Sneha Reddy',
            email='sneha.r@example.com',
            phone='+918877665544',
            address='HSR Layout, Bangalore',
        ),
        documents=VehicleDocuments(
            rc_status='Expired', rc_expiry='2023-01-01',
            insurance_status='Expired', insurance_expiry='2023-06-15',
            puc_status='Expired', puc_expiry='2022-12-30',
        ),
    ),
}


def normalize_plate(plate: str) -> str:
    """Strip spaces and punctuation, uppercase"""
    return re.sub(r'[^a-zA-Z0-9]', '', plate or '').upper()


class MockVehicleRegistry:
    """
    Mock RTO vehicle lookup

    Features:
    - Seeded records for known demo plates
    - Generic placeholder records for unknown plates
    - Configurable simulated network latency
    """

    def __init__(self, config: dict = None, rng: random.Random = None):
        """
        Initialize the registry

        Args:
            config: Registry configuration (latency)
            rng: Random source for generated records (seedable in tests)
        """
        self.config = config or {}
        self.latency = float(self.config.get('latency', 0.8))
        self.rng = rng or random.Random()

        self.records: Dict[str, VehicleRecord] = {
            plate: record.model_copy(deep=True) for plate, record in SEEDED_VEHICLES.items()
        }
        self.lookup_count = 0

        print(f"[OK] Vehicle registry initialized ({len(self.records)} seeded records)")

    async def lookup(self, plate_number: str) -> Optional[VehicleRecord]:
        """
        Resolve a plate to a vehicle record

        Returns None only for an empty plate; every other plate resolves,
        either to a seeded record or to a generic placeholder.
        """
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        self.lookup_count += 1
        plate = normalize_plate(plate_number)
        if not plate:
            return None

        record = self.records.get(plate)
        if record:
            return record.model_copy(deep=True)

        return self._generate_record(plate)

    def register(self, record: VehicleRecord):
        """Add or replace a record (demo/admin use)"""
        self.records[normalize_plate(record.plate_number)] = record.model_copy(deep=True)

    def _generate_record(self, plate: str) -> VehicleRecord:
        """Placeholder record for a plate the registry does not know"""
        rng = self.rng
        return VehicleRecord(
            plate_number=plate,
            model='Unknown Vehicle',
            type='Four Wheeler',
            is_stolen=False,
            owner=VehicleOwner(
                name='Unknown Owner',
                email='unknown@example.com',
                phone='0000000000',
                address='Not Available',
            ),
            documents=VehicleDocuments(
                rc_status='Expired' if rng.random() > 0.8 else 'Active',
                rc_expiry='2025-01-01',
                insurance_status='Expired' if rng.random() > 0.7 else 'Active',
                insurance_expiry='2025-06-01',
                puc_status='Expired' if rng.random() > 0.6 else 'Active',
                puc_expiry='2024-12-01',
            ),
        )
