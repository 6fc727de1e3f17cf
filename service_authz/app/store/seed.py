"""
YAML seed loader for role stores.

Seed files look like::

    roles:
      - role_id: user
        permissions:
          - path: "hr:payroll:view"
            regions: ["SEA"]
            except_countries: ["MM"]
    items:
      - name: "Item A"
        qty: 5
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ValidationError
from shared.logging import get_logger
from ..rules.models import RoleDocument
from .base import RoleStore

logger = get_logger("authz.store.seed")


def read_seed(path: Union[str, Path]) -> Dict[str, Any]:
    """Parse a seed file into ``{"roles": [...], "items": [...]}``."""
    seed_path = Path(path)
    try:
        with seed_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"cannot read seed file {seed_path}", {"error": str(e)}) from e

    if not isinstance(data, dict):
        raise ValidationError(f"seed file {seed_path} must contain a mapping")
    return {
        "roles": data.get("roles") or [],
        "items": data.get("items") or [],
    }


async def load_seed(store: RoleStore, path: Union[str, Path], include_items: bool = True) -> Dict[str, int]:
    """Write the roles (and, unless disabled, the items) of a seed file into ``store``."""
    data = read_seed(path)

    roles = 0
    for raw in data["roles"]:
        try:
            role = RoleDocument.model_validate(raw).to_role()
        except PydanticValidationError as e:
            raise ValidationError("invalid role in seed file", {"error": str(e)}) from e
        await store.save_role(role)
        roles += 1

    items = 0
    for raw in (data["items"] if include_items else ()):
        await store.add_item(str(raw["name"]), int(raw.get("qty", 0)))
        items += 1

    logger.info("Seed loaded", path=str(path), roles=roles, items=items)
    return {"roles": roles, "items": items}
