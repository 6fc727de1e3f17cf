"""
Authorization Service package.

Decides whether an authenticated caller may perform an action path in a
country, based on the roles named in the forwarded token. It provides:

- app.main: API surface with guarded endpoints, ad-hoc checks and health.
- app.rules: Permission model, path matching, geography and the engine.
- app.geo: The static region registry.
- app.claims: Typed claims from the gateway-verified token.
- app.store: Role stores (memory, PostgreSQL, Redis cache) and seeding.
- app.domain: Profile building and the route guard.

Guidelines:
- Evaluation is pure and synchronous; resolve roles before calling it.
- Fail closed: any error on the way to a decision is a deny.
"""
