"""
Módulo del dashboard de usuario.
"""

from workspot.dashboard.loader import DashboardLoader, DashboardView

__all__ = ["DashboardLoader", "DashboardView"]
