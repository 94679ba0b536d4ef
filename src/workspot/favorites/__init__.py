"""
Módulo de favoritos.
"""

from workspot.favorites.service import FavoritesService

__all__ = ["FavoritesService"]
