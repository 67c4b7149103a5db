"""
Version metadata schemas.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class ProjectFileHandler(BaseModel):
    """
    Metadata of one uploaded version; never carries the archive bytes.

    ``resource_id`` addresses the blob in the artifact transport and
    ``local_file`` is the artifact reference recorded at registration.
    """

    project_id: int
    version: int
    uploader: str
    upload_time: datetime
    md5: Optional[bytes] = None
    resource_id: Optional[str] = None
    file_type: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    local_file: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def md5_hex(self) -> Optional[str]:
        return self.md5.hex() if self.md5 is not None else None

    @property
    def local_path(self) -> Optional[Path]:
        return Path(self.local_file) if self.local_file else None

    @property
    def upload_completed(self) -> bool:
        return self.uploaded_at is not None
