from __future__ import annotations

from enum import Enum


class CatalogSort(str, Enum):
    """Sort orders accepted by the catalog product listing.

    Using (str, Enum) for Python 3.10 compatibility (StrEnum requires 3.11+).
    """

    RELEVANCIA = "relevancia"
    NOVEDADES = "novedades"
    PRECIO_ASC = "precio_asc"
    PRECIO_DESC = "precio_desc"
    RATING_DESC = "rating_desc"


class SortDirection(str, Enum):
    """Sort direction for admin resource listings."""

    ASC = "asc"
    DESC = "desc"
