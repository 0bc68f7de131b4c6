# tbx/routers/__init__.py

from tbx.routers import health
from tbx.routers import classify
from tbx.routers import memory
from tbx.routers import config

__all__ = ["health", "classify", "memory", "config"]
