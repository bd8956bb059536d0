# storage/base.py
from abc import ABC, abstractmethod
from typing import List
from .dto import FileHandle, ListSortOrder


class StorageClient(ABC):
    """
    Abstract base class for a cloud storage client.
    Defines the remote operations that all specific storage clients
    (e.g., Google Drive, Dropbox) must implement. Every call is a single
    remote round-trip; failures are raised, never swallowed.
    """

    @abstractmethod
    def get_file(self, file_id: str) -> FileHandle:
        """
        Resolves the metadata of a single remote object.

        :param file_id: The ID of the file or folder.
        :return: The object's FileHandle.
        """
        pass

    @abstractmethod
    def list_files(
        self,
        folder_id: str,
        order_by: ListSortOrder = ListSortOrder.FOLDER_MODIFIED_NAME,
        max_files: int = 1000,
    ) -> List[FileHandle]:
        """
        Lists the direct (non-recursive) children of a folder.

        :param folder_id: The ID of the folder to list.
        :param order_by: Sort key applied to the listing.
        :param max_files: Upper bound on the number of returned entries.
        :return: At most `max_files` FileHandles, in `order_by` order.
        """
        pass

    @abstractmethod
    def copy_file(self, file_id: str, to_folder_id: str) -> FileHandle:
        """
        Makes a server-side copy of a file inside another folder.
        The name of the copy is not guaranteed to match the original.

        :param file_id: The ID of the file to copy.
        :param to_folder_id: The ID of the destination folder.
        :return: The FileHandle of the new copy.
        """
        pass

    @abstractmethod
    def create_directory(self, name: str, parents: List[str]) -> FileHandle:
        """
        Creates a new folder.

        :param name: Name of the new folder.
        :param parents: IDs of the parent folders.
        :return: The FileHandle of the new folder, with a fresh ID.
        """
        pass

    @abstractmethod
    def rename(self, file_id: str, name: str) -> None:
        """
        Renames a file or folder in place.

        :param file_id: The ID of the object to rename.
        :param name: The new name.
        """
        pass

    @abstractmethod
    def get_account_email(self) -> str:
        """Returns the email address of the authenticated user."""
        pass
