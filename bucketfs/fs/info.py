# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""File-info records translated from object store metadata."""

import stat
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bucketfs.client.types import ObjectAttributes

FILE_MODE = stat.S_IFREG | 0o644
DIR_MODE = stat.S_IFDIR | 0o755


@dataclass(frozen=True)
class FileInfo:
    """
    Metadata for a path as seen through the filesystem.

    Attributes:
        name (str): Full object name or directory path
        size (int): Size in bytes, 0 for directories
        mod_time (datetime): Last modification time, None for directories
        is_dir (bool): True only for synthesized directories
        content_type (str): Store-reported content type, if any
    """
    name: str
    size: int = 0
    mod_time: Optional[datetime] = None
    is_dir: bool = False
    content_type: Optional[str] = None

    @property
    def mode(self) -> int:
        # Presentation only; the store has no permission bits.
        return DIR_MODE if self.is_dir else FILE_MODE

    @classmethod
    def from_attributes(cls, attrs: ObjectAttributes) -> "FileInfo":
        """Translate object attributes. Objects are never directories."""
        return cls(
            name=attrs.name,
            size=attrs.size,
            mod_time=attrs.updated,
            is_dir=False,
            content_type=attrs.content_type,
        )

    @classmethod
    def directory(cls, name: str) -> "FileInfo":
        """Synthetic record for a directory that exists only as a prefix."""
        return cls(name=name, is_dir=True)
