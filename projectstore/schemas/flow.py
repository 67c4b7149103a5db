"""
Flow snapshot schema.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class Flow(BaseModel):
    """
    A flow graph as produced by the archive loader.

    The graph is opaque to the store; it only needs to be JSON-serializable.
    """

    id: str = Field(..., min_length=1, max_length=128)
    graph: Dict[str, Any] = Field(default_factory=dict)
