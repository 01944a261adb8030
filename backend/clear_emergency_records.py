"""
Clear records that were verified from the emergency snapshot.

Those titles were adjudicated while every live feed was down. Deleting them
lets the next live cycle verify them again.
"""

from truthguard.core.config import MONGO_DB_NAME, MONGO_URI
from truthguard.core.database import create_client, get_claims_collection
from truthguard.repository.claim_repository import ClaimRepository
from truthguard.services.source_service import EMERGENCY_SOURCE


def clear_emergency_records(repo: ClaimRepository, confirm=input) -> int:
    """Remove records produced in degraded mode after confirmation."""

    print("=" * 80)
    print("CLEARING EMERGENCY SNAPSHOT RECORDS")
    print("=" * 80)
    print()

    records = repo.find_by_source(EMERGENCY_SOURCE)
    for record in records:
        print(f"[FOUND] {record.get('scope', '?')}: {record.get('title', '')[:60]}...")

    print()
    print(f"[INFO] Found {len(records)} emergency snapshot records")

    if not records:
        print("\n[INFO] Nothing to clear!")
        return 0

    print()
    response = confirm("Delete these records? (yes/no): ").strip().lower()
    if response != "yes":
        print("\n[CANCELLED] No changes made")
        return 0

    deleted = repo.delete_by_source(EMERGENCY_SOURCE)
    print(f"\n[SUCCESS] Deleted {deleted} emergency snapshot records")
    return deleted


if __name__ == "__main__":
    client = create_client(MONGO_URI)
    try:
        clear_emergency_records(ClaimRepository(get_claims_collection(client, MONGO_DB_NAME)))
    finally:
        client.close()
