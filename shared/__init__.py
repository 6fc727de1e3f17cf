"""
Shared utilities for the Authorization Service.

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- retry: Retry decorator for store I/O
- base_service: FastAPI service skeleton

Do not import from service packages into shared/.
"""
