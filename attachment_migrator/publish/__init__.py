"""
Publishing of payloads to the destination store.
"""

from .publisher import Publisher

__all__ = ["Publisher"]
