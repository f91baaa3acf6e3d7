from .auth.router import router as auth_router
from .dashboard.router import router as dashboard_router
from .patients.router import router as patients_router
from .appointments.router import router as appointments_router
from .inventory.router import router as inventory_router
from .admin.router import router as admin_router

__all__ = [
    "auth_router",
    "dashboard_router",
    "patients_router",
    "appointments_router",
    "inventory_router",
    "admin_router",
]
