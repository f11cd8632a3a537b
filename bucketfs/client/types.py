from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

@dataclass(frozen=True)
class ObjectAttributes:
    """Metadata for an object."""
    name: str
    size: int
    updated: Optional[datetime]
    content_type: Optional[str] = None

@dataclass
class ListPage:
    """One page of a prefix listing."""
    entries: List[ObjectAttributes] = field(default_factory=list)
    next_cursor: Optional[str] = None
