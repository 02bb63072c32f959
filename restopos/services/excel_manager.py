"""
Excel File Manager with Concurrency Control

Lock-guarded Excel operations for:
- The order ledger (one row per recorded order, all accounts)
- Order history workbooks downloaded from the POS
"""

import io
from datetime import datetime
from typing import Any, Iterable, Optional
from pathlib import Path

import pandas as pd
from filelock import FileLock, Timeout

from restopos.core.config import get_settings
import logging

settings = get_settings()
logger = logging.getLogger(__name__)

DATA_DIR = Path(settings.data_directory)
ORDERS_FILE = DATA_DIR / settings.excel_filename
ORDERS_LOCK = DATA_DIR / f"{settings.excel_filename}.lock"


class ExcelManager:
    """Lock-guarded Excel file manager."""

    LOCK_TIMEOUT = settings.excel_lock_timeout

    ORDER_COLUMNS = [
        "order_id",
        "order_number",
        "pos_account_id",
        "restaurant_name",
        "date_time",
        "payment_method",
        "items",
        "item_count",
        "total_amount",
        "exported_at",
    ]

    HISTORY_COLUMNS = [
        "Order Number",
        "Date",
        "Time",
        "Payment Method",
        "Items",
        "Item Count",
        "Total Amount",
    ]

    @classmethod
    def _ensure_data_dir(cls) -> None:
        """Create data directory if needed."""
        if not DATA_DIR.exists():
            DATA_DIR.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {DATA_DIR}")

    @classmethod
    def _load_or_create_df(cls, file_path: Path, columns: list) -> pd.DataFrame:
        """Load existing file or create new DataFrame."""
        if file_path.exists():
            return pd.read_excel(file_path, engine="openpyxl", dtype={"order_number": str})
        return pd.DataFrame(columns=columns)

    @classmethod
    def export_order(cls, order_data: dict[str, Any]) -> dict[str, Any]:
        """Append one order to the ledger under the file lock."""
        cls._ensure_data_dir()

        order_number = order_data.get("order_number", "unknown")
        result = {
            "success": False,
            "message": "",
            "order_number": order_number,
            "exported_at": None,
        }

        try:
            lock = FileLock(str(ORDERS_LOCK), timeout=cls.LOCK_TIMEOUT)

            with lock:
                logger.debug(f"Lock acquired for Order #{order_number}")

                df = cls._load_or_create_df(ORDERS_FILE, cls.ORDER_COLUMNS)

                export_time = datetime.now().isoformat()
                new_row = {
                    "order_id": order_data.get("order_id"),
                    "order_number": order_number,
                    "pos_account_id": order_data.get("pos_account_id"),
                    "restaurant_name": order_data.get("restaurant_name"),
                    "date_time": order_data.get("created_at", export_time),
                    "payment_method": order_data.get("payment_method"),
                    "items": order_data.get("items"),
                    "item_count": order_data.get("item_count", 0),
                    "total_amount": order_data.get("total_amount"),
                    "exported_at": export_time,
                }

                new_df = pd.DataFrame([new_row], columns=cls.ORDER_COLUMNS)
                df = new_df if df.empty else pd.concat([df, new_df], ignore_index=True)
                df.to_excel(str(ORDERS_FILE), index=False, engine="openpyxl")

                logger.info(f"Order #{order_number} exported to Excel")

                result["success"] = True
                result["message"] = f"Order #{order_number} exported"
                result["exported_at"] = export_time

            logger.debug(f"Lock released for Order #{order_number}")

        except Timeout:
            result["message"] = f"Lock timeout ({cls.LOCK_TIMEOUT}s)"
            logger.error(f"Lock timeout for Order #{order_number}")

        return result

    @classmethod
    def get_all_orders(cls, account_id: Optional[str] = None) -> list[dict[str, Any]]:
        """Ledger rows, optionally only those of one account."""
        if not ORDERS_FILE.exists():
            return []

        with FileLock(str(ORDERS_LOCK), timeout=cls.LOCK_TIMEOUT):
            df = pd.read_excel(ORDERS_FILE, engine="openpyxl", dtype={"order_number": str})

        if account_id is not None:
            df = df[df["pos_account_id"] == account_id]
        return df.to_dict("records")

    @classmethod
    def clear_all(cls) -> bool:
        """Delete the ledger and its lock file."""
        for f in [ORDERS_FILE, ORDERS_LOCK]:
            if f.exists():
                f.unlink()
        logger.info("Excel ledger cleared")
        return True

    @staticmethod
    def orders_workbook(orders: Iterable[dict[str, Any]], sheet_name: str = "Orders") -> bytes:
        """
        Workbook bytes of an account's order history.

        ``orders`` are serialized orders with local ``created_at`` datetimes.
        """
        rows = [
            {
                "Order Number": o["order_number"],
                "Date": o["created_at"].strftime("%Y-%m-%d"),
                "Time": o["created_at"].strftime("%H:%M:%S"),
                "Payment Method": str(o["payment_method"]).upper(),
                "Items": ", ".join(f"{i['quantity']}x {i['item_name']}" for i in o["items"]),
                "Item Count": sum(int(i["quantity"]) for i in o["items"]),
                "Total Amount": round(float(o["total_amount"]), 2),
            }
            for o in orders
        ]
        df = pd.DataFrame(rows, columns=ExcelManager.HISTORY_COLUMNS)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
        return buffer.getvalue()
