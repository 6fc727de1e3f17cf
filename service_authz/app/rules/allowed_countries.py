"""
Allowed-country pre-check set.

The set is the union of every country a principal's permissions could
reach. ``except_*`` fields are ignored because exclusions only apply to the
permission (and path) that declares them, so membership here never grants
access by itself; it only lets the engine reject early.
"""

from typing import FrozenSet, Iterable, Optional, Set

from ..geo.registry import DEFAULT_GEO_REGISTRY, WILDCARD, GeoRegistry, normalize_country
from .models import Role


class AllowedCountrySetBuilder:
    """Computes the derived ``allowed_countries`` of a principal."""

    def __init__(self, registry: Optional[GeoRegistry] = None):
        self.registry = registry or DEFAULT_GEO_REGISTRY

    def build(self, roles: Iterable[Role]) -> FrozenSet[str]:
        countries: Set[str] = set()
        for role in roles:
            for permission in role.permissions:
                for region in permission.regions:
                    if self.registry.is_universal(region):
                        countries.add(WILDCARD)
                    else:
                        countries.update(self.registry.countries_of(region))
                countries.update(permission.countries)
        return frozenset(countries)


def country_in_set(allowed_countries: FrozenSet[str], country: str) -> bool:
    """Membership test where a ``*`` entry matches every country."""
    return WILDCARD in allowed_countries or normalize_country(country) in allowed_countries
