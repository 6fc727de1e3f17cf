"""
Per-permission country resolution.
"""

from typing import Iterable, Optional

from ..geo.registry import DEFAULT_GEO_REGISTRY, WILDCARD, GeoRegistry, normalize_country
from .models import Permission


class GeoResolver:
    """Decides whether a permission's geography covers a country.

    Exclusions are checked before inclusions, so a permission that both
    includes and excludes a country denies it.
    """

    def __init__(self, registry: Optional[GeoRegistry] = None):
        self.registry = registry or DEFAULT_GEO_REGISTRY

    def is_permitted(self, country: str, permission: Permission) -> bool:
        code = normalize_country(country)

        if self._listed(permission.except_countries, code):
            return False
        if self._in_any_region(permission.except_regions, code):
            return False
        if self._listed(permission.countries, code):
            return True
        if self._in_any_region(permission.regions, code):
            return True
        return False

    @staticmethod
    def _listed(countries: Iterable[str], code: str) -> bool:
        return code in countries or WILDCARD in countries

    def _in_any_region(self, regions: Iterable[str], code: str) -> bool:
        return any(self.registry.contains(region, code) for region in regions)
