"""HTTP API for the credit engine."""
from credit_engine.api.routes import router

__all__ = ["router"]
