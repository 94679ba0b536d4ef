"""
Listados: publicación (con predicción previa) y mantenimiento.
"""

from workspot.listings.submission import ListingDraft, ListingSubmission
from workspot.listings.service import ListingService

__all__ = [
    "ListingDraft",
    "ListingSubmission",
    "ListingService",
]
