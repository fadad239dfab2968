"""
ResourceHub - Employee and Resource Allocation Management

This package contains the ResourceHub backend services:
- api: FastAPI REST endpoints
- engine: Allocation rules, over-allocation detection, capacity heat maps
- storage: SQLAlchemy models, database adapter and repositories
- platform: Cross-cutting concerns (configuration, logging, metrics)
"""

__version__ = "0.1.0"
