# storage/dto.py
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import List, Optional

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class ListSortOrder(str, Enum):
    """Sort keys accepted by StorageClient.list_files (Drive orderBy syntax)."""

    FOLDER_MODIFIED_NAME = "folder,modifiedTime desc,name"
    NAME = "name"
    MODIFIED_TIME = "modifiedTime desc"


class FileHandle(BaseModel):
    """
    A standardized Data Transfer Object for remote file metadata to abstract away
    provider-specific file representations.

    `id` and `name` are optional because a provider listing may omit them;
    consumers that copy or rename must check both.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    modified_time: Optional[datetime] = None
    parents: List[str] = []

    @property
    def is_directory(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    @classmethod
    def from_drive(cls, item: dict) -> "FileHandle":
        """Builds a handle from a Google Drive v3 `File` resource."""
        return cls(
            id=item.get("id"),
            name=item.get("name"),
            mime_type=item.get("mimeType"),
            size=item.get("size"),
            modified_time=item.get("modifiedTime"),
            parents=item.get("parents", []),
        )


class CopyRequest(BaseModel):
    """A request to replicate one folder tree under another folder."""

    model_config = ConfigDict(frozen=True)

    src_folder_id: str
    to_folder_id: str


class TraversalFrame(BaseModel):
    """One folder level of a copy: the source folder and its replica."""

    model_config = ConfigDict(frozen=True)

    src_folder_id: str
    to_folder_id: str


class CopyFolderStats(BaseModel):
    folders_created: int = 0
    files_copied: int = 0
