"""
Permission data models for the Authorization Service.

Domain objects (``Permission``, ``Role``, ``Requirement``,
``PrincipalProfile``) are frozen dataclasses so a loaded role cannot change
during the request that uses it. Pydantic models validate data crossing a
boundary: role documents from the store and HTTP request/response bodies.
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple
from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator

from ..geo.registry import GLOBAL_REGION, UNIVERSAL_REGIONS, normalize_country
from .matcher import Path, format_path, parse_path


def _upper_set(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    return frozenset(normalize_country(v) for v in (values or ()) if v is not None)


@dataclass(frozen=True)
class Permission:
    """A single grant rule scoped by path and geography."""
    path: Path = ()
    regions: FrozenSet[str] = frozenset()
    countries: FrozenSet[str] = frozenset()
    except_regions: FrozenSet[str] = frozenset()
    except_countries: FrozenSet[str] = frozenset()
    except_paths: Tuple[Path, ...] = ()

    @classmethod
    def create(
        cls,
        path: Optional[str] = None,
        regions: Optional[Iterable[str]] = None,
        countries: Optional[Iterable[str]] = None,
        except_regions: Optional[Iterable[str]] = None,
        except_countries: Optional[Iterable[str]] = None,
        except_paths: Optional[Iterable[str]] = None,
    ) -> "Permission":
        """Build a permission from raw, possibly unnormalized values."""
        return cls(
            path=parse_path(path),
            regions=_upper_set(regions),
            countries=_upper_set(countries),
            except_regions=_upper_set(except_regions),
            except_countries=_upper_set(except_countries),
            except_paths=tuple(parse_path(p) for p in (except_paths or ()) if p is not None),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "path": format_path(self.path),
            "regions": sorted(self.regions),
            "countries": sorted(self.countries),
            "except_regions": sorted(self.except_regions),
            "except_countries": sorted(self.except_countries),
            "except_paths": [format_path(p) for p in self.except_paths],
        }


@dataclass(frozen=True)
class Role:
    """A role and its ordered permissions."""
    role_id: str
    permissions: Tuple[Permission, ...] = ()

    def to_document(self) -> Dict[str, Any]:
        return {
            "role_id": self.role_id,
            "permissions": [p.to_document() for p in self.permissions],
        }


@dataclass(frozen=True)
class Requirement:
    """The path and country an endpoint demands."""
    path: Path
    country: str = GLOBAL_REGION

    @classmethod
    def of(cls, path: str, country: Optional[str] = GLOBAL_REGION) -> "Requirement":
        code = normalize_country(country) or GLOBAL_REGION
        if code in UNIVERSAL_REGIONS:
            code = GLOBAL_REGION
        return cls(path=parse_path(path), country=code)

    @property
    def is_global(self) -> bool:
        return self.country == GLOBAL_REGION

    @property
    def path_text(self) -> str:
        return format_path(self.path)


@dataclass(frozen=True)
class PrincipalProfile:
    """Request-scoped view of the caller: resolved roles plus derived countries."""
    user_id: str
    roles: Tuple[Role, ...] = ()
    allowed_countries: FrozenSet[str] = frozenset()

    @property
    def role_ids(self) -> List[str]:
        return [role.role_id for role in self.roles]


@dataclass(frozen=True)
class Decision:
    """Outcome of an evaluation; ``reason`` is for logs and metrics only."""
    allowed: bool
    reason: str
    role_id: Optional[str] = None
    permission_index: Optional[int] = None


class DecisionReason:
    """Machine-readable decision reasons."""
    COUNTRY_NOT_ALLOWED = "country_not_allowed"
    PATH_EXCLUDED = "path_excluded"
    GRANTED = "granted"
    NO_MATCHING_PERMISSION = "no_matching_permission"


class PermissionDocument(BaseModel):
    """Stored shape of a permission."""
    path: Optional[str] = None
    regions: List[str] = Field(default_factory=list)
    countries: List[str] = Field(default_factory=list)
    except_regions: List[str] = Field(default_factory=list)
    except_countries: List[str] = Field(default_factory=list)
    except_paths: List[str] = Field(default_factory=list)

    @field_validator(
        "regions", "countries", "except_regions", "except_countries", "except_paths",
        mode="before",
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_permission(self) -> Permission:
        return Permission.create(
            path=self.path,
            regions=self.regions,
            countries=self.countries,
            except_regions=self.except_regions,
            except_countries=self.except_countries,
            except_paths=self.except_paths,
        )


class RoleDocument(BaseModel):
    """Stored shape of a role."""
    role_id: str = Field(..., min_length=1)
    permissions: List[PermissionDocument] = Field(default_factory=list)

    @field_validator("permissions", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_role(self) -> Role:
        return Role(
            role_id=self.role_id,
            permissions=tuple(p.to_permission() for p in self.permissions),
        )


class AccessCheckRequest(BaseModel):
    """Request model for an ad-hoc access check."""
    path: str = Field(..., min_length=1, description="Action path, e.g. hr:payroll:view")
    country: str = Field(GLOBAL_REGION, description="ISO-2 country code or GLOBAL")


class AccessCheckResponse(BaseModel):
    """Response model for an ad-hoc access check."""
    allowed: bool
    path: str
    country: str
