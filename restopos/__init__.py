"""
                RestoPOS

Restaurant point-of-sale backend: billing, menu management, order
history, a super-admin account console and public digital menus with
PDF/QR exports.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
