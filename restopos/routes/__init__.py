"""API routers, one module per area."""

from restopos.routes import admin, auth, digital_menu, menu, orders, public, reports, settings

ROUTERS = [
    auth.router,
    admin.router,
    settings.router,
    menu.router,
    orders.router,
    reports.router,
    digital_menu.router,
    public.router,
]

__all__ = ["ROUTERS"]
