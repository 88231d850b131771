"""HTTP layer: FastAPI routers over the closing, salary, overhead and project cost services."""

from costs_api.app import create_app

__all__ = ["create_app"]
