"""
Promote Admin User Script
Grants the admin role to an existing dashboard user from the command line.

Accounts are created through Supabase Auth sign-up; this script only
changes the role on the matching ``users`` profile row.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import farm_dashboard modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from farm_dashboard.auth.supabase_client import get_supabase_admin_client
from farm_dashboard.models.user import Role, UserProfile
from farm_dashboard.store.exceptions import StoreError
from farm_dashboard.store.supabase_store import FarmStore
from farm_dashboard.store.tables import StoreTable


async def load_users(store: FarmStore) -> list[UserProfile]:
    """All profiles; raises StoreError when the store cannot be read."""
    rows = await store.list_rows(StoreTable.USERS, order_by="created_at", descending=True)
    return [UserProfile.model_validate(row) for row in rows]


async def list_admins(store: FarmStore) -> None:
    """List all current admin users."""
    users = await load_users(store)
    admins = sorted((u for u in users if u.is_admin), key=lambda u: u.email)

    if not admins:
        print("\n📋 No admin users found.")
    else:
        print(f"\n📋 Current Admin Users ({len(admins)}):")
        print("-" * 60)
        for admin in admins:
            print(f"  • {admin.email} ({admin.full_name or 'no name'})")
        print("-" * 60)


async def promote_admin(store: FarmStore, email: str) -> bool:
    """Set the admin role on the profile with this email; False if nothing changed."""
    normalized_email = email.strip().lower()
    users = await load_users(store)
    matches = [u for u in users if u.email.lower() == normalized_email]

    if not matches:
        print(f"\n❌ No profile found for {normalized_email}. Ask the user to sign up first.")
        return False

    user = matches[0]
    if user.is_admin:
        print(f"\n❌ User {normalized_email} is already an admin.")
        return False

    await store.update_row(StoreTable.USERS, user.id, {"role": Role.ADMIN.value})
    print(f"\n✅ Updated user {normalized_email} from {user.role or 'no role'} to admin.")
    return True


async def main() -> None:
    """Main script entry point."""
    print("=" * 60)
    print("🔐 Promote Admin User")
    print("=" * 60)

    store = FarmStore(get_supabase_admin_client())

    # List current admins
    try:
        await list_admins(store)
    except StoreError as e:
        print(f"\n❌ Could not read user profiles: {e.message}")
        sys.exit(1)

    # Get email
    print("\n" + "=" * 60)
    email = input("📧 Enter email address: ").strip()

    if not email:
        print("\n❌ Email is required.")
        sys.exit(1)

    # Confirm
    print("\n" + "=" * 60)
    confirm = input(f"Promote '{email}' to admin? (yes/no): ").strip().lower()

    if confirm not in ["yes", "y"]:
        print("\n❌ Cancelled.")
        sys.exit(0)

    try:
        if not await promote_admin(store, email):
            sys.exit(1)
        print("\n✅ Done!")
    except StoreError as e:
        print(f"\n❌ Error: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
