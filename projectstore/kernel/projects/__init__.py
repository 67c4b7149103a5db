"""
Project lifecycle.
"""

from projectstore.kernel.projects.project_store import ProjectStore

__all__ = ["ProjectStore"]
