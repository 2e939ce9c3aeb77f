#!/usr/bin/env python3
"""
Migration script to move pre-multi-tenant data into the default clinic.

Legacy deployments stored everything under the un-prefixed keys
``patients``, ``waiting_room`` and ``doctor_room``. This script copies them
into ``clinic:{CLINIC_LEGACY_DEFAULT_CLINIC_ID}:*`` and deletes the originals.
The application runs the same migration at startup; use this when startup
migration is disabled.

Usage:
    python scripts/migrate_legacy_keys.py --dry-run
    python scripts/migrate_legacy_keys.py --execute
"""

import argparse
import asyncio
import sys
from typing import Any, Dict

# Add the src directory to the Python path
sys.path.insert(0, "src")

from clinicdesk.adapters.db.kv.clinic_repository import KeyValueClinicRepository
from clinicdesk.adapters.storage.redis_store import RedisKeyValueStore
from clinicdesk.core.config import get_settings
from clinicdesk.domain.value_objects.clinic_keyspace import (
    LEGACY_DOCTOR_ROOM_KEY,
    LEGACY_PATIENTS_KEY,
    LEGACY_WAITING_ROOM_KEY,
)


class LegacyKeyMigration:
    """Handles migration of un-prefixed keys into the default clinic."""

    def __init__(self):
        self.settings = get_settings()
        self.store = RedisKeyValueStore.from_settings(self.settings.redis)
        self.repository = KeyValueClinicRepository(
            self.store,
            default_clinic_id=self.settings.clinic.legacy_default_clinic_id,
            migration_lock_ttl_seconds=self.settings.clinic.migration_lock_ttl_seconds,
        )

    async def analyze_current_state(self) -> Dict[str, Any]:
        """Count what is left under the legacy keys."""
        analysis = {
            "patients": await self.store.hash_length(LEGACY_PATIENTS_KEY),
            "waiting_room": await self.store.list_length(LEGACY_WAITING_ROOM_KEY),
            "doctor_room": await self.store.list_length(LEGACY_DOCTOR_ROOM_KEY),
        }
        print("📊 Legacy keys:")
        for key, count in analysis.items():
            print(f"   {key}: {count}")
        return analysis

    async def dry_run(self) -> None:
        print("🧪 Performing dry run...")
        analysis = await self.analyze_current_state()
        if not any(analysis.values()):
            print("✅ No legacy data found. Nothing to migrate.")
            return
        target = self.settings.clinic.legacy_default_clinic_id
        print(f"📋 Will copy legacy data into clinic '{target}' and delete the legacy keys")
        print("🚀 Ready to migrate. Use --execute to perform the actual migration.")

    async def execute_migration(self) -> None:
        print("🚀 Starting legacy key migration...")
        report = await self.repository.migrate_legacy_data()
        if not report.migrated:
            print(f"⚠️  Nothing migrated ({report.skipped_reason})")
            return
        print("✅ Migration completed!")
        print(f"   Target clinic: {report.target_clinic_id}")
        print(f"   Patients copied: {report.patients_copied}")
        print(f"   Waiting room entries: {report.waiting_copied}")
        print(f"   Doctor room entries: {report.doctor_copied}")
        print(f"   Legacy keys deleted: {report.legacy_keys_deleted}")

    async def close(self):
        await self.store.close()


async def main():
    parser = argparse.ArgumentParser(
        description="Migrate legacy un-prefixed keys into the default clinic"
    )
    parser.add_argument("--dry-run", action="store_true", help="Show what would be migrated")
    parser.add_argument("--execute", action="store_true", help="Execute the migration")
    args = parser.parse_args()

    if not args.dry_run and not args.execute:
        parser.print_help()
        return 1

    migration = LegacyKeyMigration()
    try:
        if args.dry_run:
            await migration.dry_run()
        if args.execute:
            await migration.execute_migration()
    finally:
        await migration.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
