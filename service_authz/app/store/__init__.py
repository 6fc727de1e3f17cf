"""
Role store package.

Role definitions are resolved here, before the engine runs:

- base: RoleStore interface and its not-found / failure errors.
- memory: Dict-backed store.
- postgres: asyncpg-backed store with bounded, retried lookups.
- redis_cache: Optional read-through cache in front of another store.
- seed: YAML seed loader.
- factory: Builds the configured store.
"""
