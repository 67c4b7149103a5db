"""
Property bundle schema.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field


class Props(BaseModel):
    """Ordered string-to-string configuration addressed by a logical path."""

    path_name: str = Field(..., min_length=1, max_length=512)
    entries: Dict[str, str] = Field(default_factory=dict)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.entries.get(key, default)

    def to_pairs(self) -> List[List[str]]:
        return [[k, v] for k, v in self.entries.items()]

    @classmethod
    def from_pairs(cls, path_name: str, pairs: Iterable[Tuple[str, str]]) -> "Props":
        return cls(path_name=path_name, entries={k: v for k, v in pairs})
