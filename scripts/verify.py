"""
Excel Ledger Verification Script

Checks the order ledger written by the Celery export task.
Run from project root: python scripts/verify.py [--reset]
"""

import argparse
import os
import sys
from datetime import datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd

from restopos.services.excel_manager import ORDERS_FILE, ExcelManager


def verify_excel() -> bool:
    """Verify the ledger after a simulation run."""

    print("=" * 60)
    print("🔍 EXCEL LEDGER VERIFICATION")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"📄 File: {ORDERS_FILE}")
    print("=" * 60)

    if not ORDERS_FILE.exists():
        print("\n❌ Ledger not found!")
        print("   Run the simulation first: python scripts/simulate.py")
        return False

    df = pd.DataFrame(ExcelManager.get_all_orders())
    print(f"\n✅ Ledger loaded")

    print(f"\n📊 STATISTICS:")
    print(f"   Total Orders: {len(df)}")
    print(f"   Accounts: {df['pos_account_id'].nunique() if len(df) else 0}")

    missing = [col for col in ExcelManager.ORDER_COLUMNS if col not in df.columns]
    if missing:
        print(f"\n⚠️ Missing Columns: {missing}")
    else:
        print(f"\n✅ All ledger columns present")

    if len(df):
        duplicates = df.duplicated(subset=["pos_account_id", "order_number"]).sum()
        if duplicates > 0:
            print(f"\n⚠️ {duplicates} duplicate order numbers found!")
        else:
            print(f"✅ No duplicate order numbers")

        print(f"\n💰 REVENUE BY RESTAURANT:")
        by_restaurant = df.groupby("restaurant_name")["total_amount"].agg(["count", "sum"])
        for name, row in by_restaurant.iterrows():
            print(f"   {name}: {int(row['count'])} orders, ₹{row['sum']:.2f}")

        print(f"\n💳 PAYMENT METHODS:")
        print(df["payment_method"].value_counts().to_string())

        print(f"\n📋 RECENT ORDERS:")
        print("-" * 60)
        cols = ["order_number", "restaurant_name", "payment_method", "total_amount"]
        print(df[cols].tail(5).to_string(index=False))

    print("\n" + "=" * 60)
    print("✅ VERIFICATION COMPLETE")
    print("=" * 60)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Verify the Excel order ledger")
    parser.add_argument("--reset", action="store_true", help="Delete the ledger instead of checking it")
    args = parser.parse_args()

    if args.reset:
        ExcelManager.clear_all()
        print(f"🗑️  Ledger cleared: {ORDERS_FILE}")
        sys.exit(0)

    sys.exit(0 if verify_excel() else 1)
