"""Versioned API aggregator.

    from moviemeter.api.v1.routers import router as api_router
"""

__all__ = []
