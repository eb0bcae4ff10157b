"""Catalog: read-only access to metadata records and caller principals."""

from src.catalog.repository import CatalogRepository
from src.catalog.schemas import MetadataRecord, Principal, Profile

__all__ = [
    "CatalogRepository",
    "MetadataRecord",
    "Principal",
    "Profile",
]
