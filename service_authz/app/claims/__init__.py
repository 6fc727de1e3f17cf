"""
Claims package.

Turns the bearer token forwarded by the gateway into ``PrincipalClaims``.
"""
