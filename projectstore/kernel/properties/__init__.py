"""
Per-version configuration bundles.
"""

from projectstore.kernel.properties.property_store import PropertyStore

__all__ = ["PropertyStore"]
