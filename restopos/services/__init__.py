"""
                        Services Module

Business logic of the POS. Every operation takes an ``AsyncSession``,
returns plain JSON-ready data and raises ``restopos.core.exceptions``
errors on failure.

Services:
    - security: bcrypt hashing and login sessions
    - accounts: logins and the super-admin account console
    - settings_service: restaurant settings and the order edit policy
    - menu: menu items and categories
    - cart / orders: billing cart and order recording
    - reports: analytics and sales report bucketing (pandas)
    - themes / layouts / digital_menu: the public themed menu
    - pdf_reports / qr: PDF and QR code exports
    - excel_manager: lock-guarded Excel ledger
"""

from restopos.services.excel_manager import ExcelManager

__all__ = ["ExcelManager"]
