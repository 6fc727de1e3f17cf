"""
Permission evaluation package.

Defines the permission model and the engine that decides whether a
principal may perform an action path in a country. Evaluation is pure and
synchronous; all I/O (role lookup) happens before the engine is called.

Modules of interest:
- models: Permission, Role, Requirement, PrincipalProfile and stored shapes.
- matcher: Fixed-arity wildcard path matching.
- geo_resolver: Per-permission country inclusion/exclusion.
- allowed_countries: Role-wide country pre-check set.
- engine: The aggregate multi-role decision.
"""
