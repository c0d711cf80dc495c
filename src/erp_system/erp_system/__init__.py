"""Multi-tenant ERP backend (HR, finance, stock, sales, RBAC, audit, notifications)."""

__version__ = "1.0.0"
