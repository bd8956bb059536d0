import dropbox
from dropbox.files import DeletedMetadata, FolderMetadata
from dropbox.exceptions import ApiError
from datetime import datetime
import logging
import posixpath
from typing import List
from .storage.base import StorageClient
from .storage.dto import FOLDER_MIME_TYPE, FileHandle, ListSortOrder

# Dropbox addresses its root folder with an empty path.
ROOT_ALIASES = ("", "root")


def _to_handle(entry) -> FileHandle:
    """Converts Dropbox metadata to our standardized DTO."""
    if isinstance(entry, FolderMetadata):
        return FileHandle(id=entry.id, name=entry.name, mime_type=FOLDER_MIME_TYPE)
    return FileHandle(
        id=entry.id,
        name=entry.name,
        mime_type="application/octet-stream",
        size=entry.size,
        modified_time=entry.server_modified,
    )


def _sort_handles(handles: List[FileHandle], order_by: ListSortOrder):
    """
    Applies a Drive-style sort key on the client side, since Dropbox listings
    come back unordered. Stable sorts are chained from the least to the most
    significant key.
    """
    handles.sort(key=lambda h: h.name or "")
    if order_by in (ListSortOrder.FOLDER_MODIFIED_NAME, ListSortOrder.MODIFIED_TIME):
        handles.sort(key=lambda h: h.modified_time or datetime.min, reverse=True)
    if order_by == ListSortOrder.FOLDER_MODIFIED_NAME:
        handles.sort(key=lambda h: not h.is_directory)


class DropboxClient(StorageClient):
    """
    Client for interacting with the Dropbox API, implementing the StorageClient interface.
    Objects are addressed by their Dropbox ID ("id:..."), which the API accepts
    wherever a path is expected.
    """

    def __init__(self, app_key, app_secret, refresh_token):
        try:
            self.dbx = dropbox.Dropbox(
                app_key=app_key,
                app_secret=app_secret,
                oauth2_refresh_token=refresh_token,
            )
            # Verify successful authentication by requesting current user info
            self.dbx.users_get_current_account()
            logging.info("Dropbox client initialized successfully.")
        except Exception as e:
            logging.error(
                f"Failed to initialize Dropbox client. Check your credentials. Error: {e}"
            )
            raise

    def _path_of(self, folder_id: str) -> str:
        if folder_id in ROOT_ALIASES:
            return ""
        return self.dbx.files_get_metadata(folder_id).path_display

    def get_file(self, file_id: str) -> FileHandle:
        """Retrieves the metadata of a file or folder."""
        if file_id in ROOT_ALIASES:
            # The root folder has no metadata of its own.
            return FileHandle(id="", name="", mime_type=FOLDER_MIME_TYPE)
        try:
            return _to_handle(self.dbx.files_get_metadata(file_id))
        except ApiError as e:
            logging.error(f"Failed to get Dropbox metadata for '{file_id}': {e}")
            raise

    def list_files(
        self,
        folder_id: str,
        order_by: ListSortOrder = ListSortOrder.FOLDER_MODIFIED_NAME,
        max_files: int = 1000,
    ) -> List[FileHandle]:
        """
        Returns the children of the specified Dropbox folder. All pages are read
        so that the ordering applies to the whole folder before the cap.
        """
        path = "" if folder_id in ROOT_ALIASES else folder_id
        try:
            logging.info(f"Listing files in Dropbox folder: '{folder_id}'")
            result = self.dbx.files_list_folder(path)  # Non-recursive
            all_entries = list(result.entries)
            while result.has_more:
                logging.info("Found more files, continuing listing...")
                result = self.dbx.files_list_folder_continue(result.cursor)
                all_entries.extend(result.entries)
        except ApiError as e:
            logging.error(f"Failed to list files in Dropbox folder '{folder_id}': {e}")
            raise

        handles = [
            _to_handle(entry)
            for entry in all_entries
            if not isinstance(entry, DeletedMetadata)
        ]
        _sort_handles(handles, order_by)
        return handles[:max_files]

    def copy_file(self, file_id: str, to_folder_id: str) -> FileHandle:
        """Copies a file into another Dropbox folder on the server side."""
        try:
            source = self.dbx.files_get_metadata(file_id)
            to_path = f"{self._path_of(to_folder_id)}/{source.name}"
            logging.info(f"Copying {file_id} to {to_path}...")
            result = self.dbx.files_copy_v2(file_id, to_path, autorename=True)
            return _to_handle(result.metadata)
        except ApiError as e:
            logging.error(f"Failed to copy '{file_id}' to folder '{to_folder_id}': {e}")
            raise

    def create_directory(self, name: str, parents: List[str]) -> FileHandle:
        """Creates a folder under the first of the given parents."""
        parent_id = parents[0] if parents else ""
        try:
            path = f"{self._path_of(parent_id)}/{name}"
            logging.info(f"Creating Dropbox folder {path}...")
            result = self.dbx.files_create_folder_v2(path)
            return _to_handle(result.metadata)
        except ApiError as e:
            logging.error(f"Failed to create folder '{name}' in '{parent_id}': {e}")
            raise

    def rename(self, file_id: str, name: str) -> None:
        """Renames a file or folder by moving it within its parent folder."""
        try:
            entry = self.dbx.files_get_metadata(file_id)
            if entry.name == name:
                logging.debug(f"'{file_id}' is already named '{name}'.")
                return
            to_path = posixpath.join(posixpath.dirname(entry.path_display), name)
            logging.info(f"Renaming {entry.path_display} to {to_path}...")
            self.dbx.files_move_v2(file_id, to_path)
        except ApiError as e:
            logging.error(f"Failed to rename '{file_id}' to '{name}': {e}")
            raise

    def get_account_email(self) -> str:
        return self.dbx.users_get_current_account().email
