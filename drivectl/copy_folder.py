# copy_folder.py
"""
Recursive folder copy.

A folder tree is replicated under a destination folder by composing the
remote leaf operations of a StorageClient: list the children of a folder,
create a directory for each subfolder, copy (then rename) each file. The
remote API is not transactional: the first failure aborts the whole copy and
whatever was already created under the destination is left in place.
"""
import logging
from typing import Iterator, List, Optional, Tuple

from .exceptions import PermanentError
from .storage.base import StorageClient
from .storage.dto import (
    CopyFolderStats,
    CopyRequest,
    FileHandle,
    ListSortOrder,
    TraversalFrame,
)

# Children beyond this many in a single folder are not copied.
MAX_FILES_PER_FOLDER = 1000


class CopyFolderError(PermanentError):
    """Base class for every failure of a folder or file copy."""

    message = "Failed to copy"

    def __init__(self, cause: Optional[BaseException] = None, subject: Optional[str] = None):
        self.cause = cause
        self.subject = subject
        super().__init__(str(self))

    def __str__(self):
        text = self.message
        if self.subject is not None:
            text += f" '{self.subject}'"
        if self.cause is not None:
            text += f": {self.cause}"
        return text


class GetFileError(CopyFolderError):
    message = "Failed to get file"


class GetDestinationFolderError(CopyFolderError):
    message = "Failed to get destination folder"


class SourceNotDirectoryError(CopyFolderError):
    message = "Can only copy a directory recursively, source is not a directory"


class SourceIsDirectoryError(CopyFolderError):
    message = "Copy directories is not supported, use --recursive"


class DestinationNotDirectoryError(CopyFolderError):
    message = "Can only copy to a directory"


class ListFilesError(CopyFolderError):
    message = "Failed to list files"


class CopyFileError(CopyFolderError):
    message = "Failed copying file"


class MkdirError(CopyFolderError):
    message = "Failed creating folder"


class RenameError(CopyFolderError):
    message = "Failed renaming file"


class FileWithoutIdError(CopyFolderError):
    message = "Found a file to copy with no id"


class FileWithoutNameError(CopyFolderError):
    message = "Found a file to copy with no name"


def _get_source(hub: StorageClient, file_id: str) -> FileHandle:
    try:
        return hub.get_file(file_id)
    except Exception as e:
        raise GetFileError(e, file_id) from e


def _get_destination_folder(hub: StorageClient, folder_id: str) -> FileHandle:
    try:
        folder = hub.get_file(folder_id)
    except Exception as e:
        raise GetDestinationFolderError(e, folder_id) from e
    if not folder.is_directory:
        raise DestinationNotDirectoryError(subject=folder.name)
    return folder


def _require_id_and_name(child: FileHandle) -> Tuple[str, str]:
    if child.id is None:
        raise FileWithoutIdError(subject=child.name)
    if child.name is None:
        raise FileWithoutNameError(subject=child.id)
    return child.id, child.name


def _list_children(hub: StorageClient, folder_id: str) -> Iterator[FileHandle]:
    try:
        children = hub.list_files(
            folder_id,
            order_by=ListSortOrder.FOLDER_MODIFIED_NAME,
            max_files=MAX_FILES_PER_FOLDER,
        )
    except Exception as e:
        raise ListFilesError(e, folder_id) from e
    if len(children) >= MAX_FILES_PER_FOLDER:
        logging.warning(
            f"Folder '{folder_id}' has at least {MAX_FILES_PER_FOLDER} children; only the first {MAX_FILES_PER_FOLDER} are copied."
        )
    return iter(children)


def _make_directory(hub: StorageClient, name: str, to_folder_id: str) -> str:
    try:
        new_folder = hub.create_directory(name, parents=[to_folder_id])
    except Exception as e:
        raise MkdirError(e, name) from e
    if new_folder.id is None:
        raise FileWithoutIdError(subject=name)
    return new_folder.id


def _copy_and_rename(hub: StorageClient, file_id: str, name: str, to_folder_id: str) -> FileHandle:
    """
    Copies a file into `to_folder_id` and renames the copy to `name`, since
    some backends do not keep the original name on copy.
    """
    try:
        new_file = hub.copy_file(file_id, to_folder_id)
    except Exception as e:
        raise CopyFileError(e, name) from e
    if new_file.id is None:
        raise FileWithoutIdError(subject=name)

    try:
        hub.rename(new_file.id, name)
    except Exception as e:
        raise RenameError(e, name) from e
    return new_file.model_copy(update={"name": name})


def copy_folder_inner(
    hub: StorageClient, frame: TraversalFrame, stats: Optional[CopyFolderStats] = None
) -> CopyFolderStats:
    """
    Replicates the children of `frame.src_folder_id` under `frame.to_folder_id`.

    Depth-first: a subfolder's whole subtree is copied before its next sibling.
    The traversal keeps an explicit stack of (frame, remaining children) so the
    depth of the remote tree is not bounded by the interpreter's recursion limit.
    """
    if stats is None:
        stats = CopyFolderStats()

    stack: List[Tuple[TraversalFrame, Iterator[FileHandle]]] = [
        (frame, _list_children(hub, frame.src_folder_id))
    ]
    while stack:
        current, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            continue

        child_id, child_name = _require_id_and_name(child)
        if child.is_directory:
            new_folder_id = _make_directory(hub, child_name, current.to_folder_id)
            stats.folders_created += 1
            logging.info(f"Created folder '{child_name}' ({new_folder_id})")
            sub_frame = TraversalFrame(src_folder_id=child_id, to_folder_id=new_folder_id)
            stack.append((sub_frame, _list_children(hub, child_id)))
        else:
            _copy_and_rename(hub, child_id, child_name, current.to_folder_id)
            stats.files_copied += 1
            logging.info(f"Copied file '{child_name}'")

    return stats


def copy_folder(hub: StorageClient, src_folder_id: str, to_folder_id: str) -> CopyFolderStats:
    """
    Copies the folder `src_folder_id` into the folder `to_folder_id`.

    Both IDs are resolved and checked to be directories before anything is
    created. On failure the first error is raised and the destination keeps
    whatever part of the tree was already replicated.
    """
    request = CopyRequest(src_folder_id=src_folder_id, to_folder_id=to_folder_id)

    src_folder = _get_source(hub, request.src_folder_id)
    if not src_folder.is_directory:
        raise SourceNotDirectoryError(subject=src_folder.name)
    _get_destination_folder(hub, request.to_folder_id)

    logging.info(
        f"Copying folder '{src_folder.name}' ({request.src_folder_id}) into {request.to_folder_id}"
    )
    stats = copy_folder_inner(
        hub,
        TraversalFrame(
            src_folder_id=request.src_folder_id, to_folder_id=request.to_folder_id
        ),
    )
    logging.info(
        f"Finished copying '{src_folder.name}': {stats.folders_created} folders, {stats.files_copied} files."
    )
    return stats


def copy_file(hub: StorageClient, file_id: str, to_folder_id: str) -> FileHandle:
    """
    Copies a single file into a folder, keeping its name. Folders are refused.
    """
    source = _get_source(hub, file_id)
    if source.is_directory:
        raise SourceIsDirectoryError(subject=source.name)
    _get_destination_folder(hub, to_folder_id)

    source_id, source_name = _require_id_and_name(source)
    return _copy_and_rename(hub, source_id, source_name, to_folder_id)
