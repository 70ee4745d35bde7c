"""HTTP proxy serving cached kline prices."""

from .app import create_app

__all__ = ['create_app']
