"""
Chain agnostic Rosetta API gateway.
"""
from .config import MIDDLEWARE_VERSION as __version__
