"""
Repository package for data access layers.

Each store exposes a protocol class plus two implementations: a SQLAlchemy
one bound to the request's `AsyncSession` (served by the `get_*_repository`
dependencies) and an in-memory one used by the test suite through FastAPI
dependency overrides.
"""
