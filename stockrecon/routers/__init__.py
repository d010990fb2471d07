# stockrecon/routers/__init__.py

from stockrecon.routers import health
from stockrecon.routers import reconcile

__all__ = ["health", "reconcile"]
