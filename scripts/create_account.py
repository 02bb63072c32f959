"""
Account Bootstrap Script

Creates the super-admin and, optionally, a POS account with its digital
menu, straight against the configured database.
Run from project root:
    python scripts/create_account.py --mobile 9876543210 --pin 12345678 --name "Spice Garden"
"""

import argparse
import asyncio
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from restopos.core.config import get_settings, setup_logging
from restopos.core.exceptions import ServiceError
from restopos.database import async_session_maker, engine, init_db
from restopos.services import accounts, digital_menu


async def main(args: argparse.Namespace) -> int:
    settings = get_settings()
    await init_db()

    async with async_session_maker() as db:
        if await accounts.ensure_admin_user(db, settings.admin_username, settings.admin_password):
            print(f"✅ Admin '{settings.admin_username}' created")

        if args.mobile:
            try:
                account = await accounts.create_pos_account(
                    db, args.mobile, args.pin, args.name, args.days
                )
            except ServiceError as e:
                print(f"❌ {e.message}")
                return 1
            menu = await digital_menu.initialize_digital_menu(db, account["id"], args.name)
            print(f"✅ Account {account['restaurant_name']} ({account['mobile_number']}) created")
            print(f"   License valid until: {account['license_valid_until']}")
            print(f"   Public menu: {menu['public_url']}")

    await engine.dispose()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the admin user and a POS account")
    parser.add_argument("--mobile", help="10 digit mobile number")
    parser.add_argument("--pin", help="8 digit PIN")
    parser.add_argument("--name", default="My Restaurant", help="Restaurant name")
    parser.add_argument("--days", type=int, default=365, help="License duration in days")
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(main(args)))
