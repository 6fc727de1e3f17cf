"""
Static region -> country registry.

The registry is built once at import time and shared read-only by every
evaluation. Region names are case-insensitive; unknown regions resolve to
an empty set so they simply grant (or exclude) nothing.
"""

from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

# Country-set entry meaning "every country".
WILDCARD = "*"

# Requirement country meaning "no geographic restriction requested".
GLOBAL_REGION = "GLOBAL"

UNIVERSAL_REGIONS: FrozenSet[str] = frozenset({GLOBAL_REGION, WILDCARD})


DEFAULT_REGIONS: Dict[str, Iterable[str]] = {
    "AFRICA": (
        "DZ", "AO", "BJ", "BW", "BF", "BI", "CV", "CM", "CF", "TD", "KM", "CG", "CD", "CI",
        "DJ", "EG", "GQ", "ER", "SZ", "ET", "GA", "GM", "GH", "GN", "GW", "KE", "LS", "LR",
        "LY", "MG", "MW", "ML", "MR", "MU", "MA", "MZ", "NA", "NE", "NG", "RW", "ST", "SN",
        "SC", "SL", "SO", "ZA", "SS", "SD", "TZ", "TG", "TN", "UG", "EH", "ZM", "ZW",
    ),
    # Includes the Middle East
    "ASIA": (
        "AF", "AM", "AZ", "BH", "BD", "BT", "BN", "KH", "CN", "CY", "GE", "IN", "ID", "IR",
        "IQ", "IL", "JP", "JO", "KZ", "KW", "KG", "LA", "LB", "MY", "MV", "MN", "MM", "NP",
        "KP", "OM", "PK", "PS", "PH", "QA", "RU", "SA", "SG", "KR", "LK", "SY", "TW", "TJ",
        "TH", "TL", "TR", "TM", "AE", "UZ", "VN", "YE",
    ),
    "SEA": (
        "BN", "KH", "ID", "LA", "MY", "MM", "PH", "SG", "TH", "TL", "VN",
    ),
    "EUROPE": (
        "AL", "AD", "AT", "BY", "BE", "BA", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR",
        "DE", "GR", "HU", "IS", "IE", "IT", "LV", "LI", "LT", "LU", "MT", "MD", "MC", "ME",
        "NL", "MK", "NO", "PL", "PT", "RO", "SM", "RS", "SK", "SI", "ES", "SE", "CH", "UA",
        "UK", "VA",
    ),
    "NORTH_AMERICA": (
        "AG", "BS", "BB", "BZ", "CA", "CR", "CU", "DM", "DO", "SV", "GD", "GT", "HT", "HN",
        "JM", "MX", "NI", "PA", "KN", "LC", "VC", "TT", "US",
    ),
    "SOUTH_AMERICA": (
        "AR", "BO", "BR", "CL", "CO", "EC", "GY", "PY", "PE", "SR", "UY", "VE",
    ),
    "OCEANIA": (
        "AU", "FJ", "KI", "MH", "FM", "NR", "NZ", "PW", "PG", "WS", "SB", "TO", "TV", "VU",
    ),
    "ANTARCTICA": ("AQ",),
}


def normalize_country(country: Optional[str]) -> str:
    """Upper-case and trim a country code (``None`` becomes empty)."""
    return (country or "").strip().upper()


class GeoRegistry:
    """Immutable lookup of region membership."""

    def __init__(self, regions: Optional[Mapping[str, Iterable[str]]] = None):
        source = DEFAULT_REGIONS if regions is None else regions
        table = {}
        for name, countries in source.items():
            key = name.strip().upper()
            if key in UNIVERSAL_REGIONS:
                # Universal membership is a predicate, never an enumeration
                continue
            table[key] = frozenset(normalize_country(c) for c in countries)
        self._regions: Mapping[str, FrozenSet[str]] = MappingProxyType(table)

    @property
    def region_names(self) -> FrozenSet[str]:
        """Names of the enumerated regions."""
        return frozenset(self._regions)

    def is_universal(self, region: Optional[str]) -> bool:
        """Whether ``region`` denotes every country."""
        return (region or "").strip().upper() in UNIVERSAL_REGIONS

    def countries_of(self, region: Optional[str]) -> FrozenSet[str]:
        """Member countries of ``region``; empty for unknown or universal regions."""
        return self._regions.get((region or "").strip().upper(), frozenset())

    def contains(self, region: Optional[str], country: Optional[str]) -> bool:
        """Whether ``country`` belongs to ``region``."""
        if self.is_universal(region):
            return True
        return normalize_country(country) in self.countries_of(region)

    def __repr__(self) -> str:
        return f"GeoRegistry(regions={sorted(self._regions)})"


DEFAULT_GEO_REGISTRY = GeoRegistry()
