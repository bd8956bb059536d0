# gdrive.py
import logging
import json

from .storage.base import StorageClient
from .storage.dto import FOLDER_MIME_TYPE, FileHandle, ListSortOrder
from typing import List, Optional
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

# The Drive API refuses page sizes above this value.
MAX_PAGE_SIZE = 1000
FILE_FIELDS = "id, name, mimeType, size, modifiedTime, parents"


class GoogleDriveClient(StorageClient):
    """
    Client for interacting with the Google Drive API, implementing the StorageClient interface.
    """

    def __init__(self, token_json: str, credentials_json: Optional[str] = None):
        try:
            token_info = json.loads(token_json)
            creds = Credentials.from_authorized_user_info(info=token_info)

            # The credentials_json is the OAuth client config (credentials.json).
            # When present it overrides the client_id/client_secret stored with the token.
            if credentials_json:
                credentials_data = json.loads(credentials_json)
                client_data = credentials_data.get("installed") or credentials_data.get(
                    "web", credentials_data
                )
                if "client_id" in client_data and "client_secret" in client_data:
                    creds.client_id = client_data["client_id"]
                    creds.client_secret = client_data["client_secret"]
                else:
                    logging.warning(
                        "client_id or client_secret not found in GDRIVE_CREDENTIALS_JSON. Using the ones stored with the account token."
                    )

            self.service = build("drive", "v3", credentials=creds)
            logging.info("Google Drive client initialized successfully.")
        except Exception as e:
            logging.error(f"Failed to initialize Google Drive client. Error: {e}")
            raise

    def get_file(self, file_id: str) -> FileHandle:
        """
        Retrieves the metadata of a file or folder by its ID.
        """
        try:
            logging.debug(f"Getting metadata of Google Drive file ID '{file_id}'")
            item = (
                self.service.files()
                .get(fileId=file_id, fields=FILE_FIELDS, supportsAllDrives=True)
                .execute()
            )
            return FileHandle.from_drive(item)
        except HttpError as e:
            logging.error(f"Failed to get Google Drive file ID '{file_id}': {e}")
            raise

    def list_files(
        self,
        folder_id: str,
        order_by: ListSortOrder = ListSortOrder.FOLDER_MODIFIED_NAME,
        max_files: int = 1000,
    ) -> List[FileHandle]:
        """
        Lists the children of a Google Drive folder ID and returns them as DTOs.
        Pages are requested until `max_files` entries have been collected or the
        API reports no further page.
        """
        query = f"'{folder_id}' in parents and trashed = false"
        files: List[FileHandle] = []
        page_token = None
        try:
            logging.info(f"Listing files in Google Drive folder ID: '{folder_id}'")
            while len(files) < max_files:
                response = (
                    self.service.files()
                    .list(
                        q=query,
                        orderBy=order_by.value,
                        pageSize=min(max_files - len(files), MAX_PAGE_SIZE),
                        pageToken=page_token,
                        fields=f"nextPageToken, files({FILE_FIELDS})",
                        supportsAllDrives=True,
                        includeItemsFromAllDrives=True,
                    )
                    .execute()
                )
                files.extend(
                    FileHandle.from_drive(item) for item in response.get("files", [])
                )
                page_token = response.get("nextPageToken")
                if not page_token:
                    break
            return files[:max_files]
        except HttpError as e:
            logging.error(
                f"Failed to list files in Google Drive folder ID '{folder_id}': {e}"
            )
            raise

    def copy_file(self, file_id: str, to_folder_id: str) -> FileHandle:
        """
        Copies a file into another folder on the server side.
        """
        try:
            logging.info(f"Copying file ID '{file_id}' to folder ID '{to_folder_id}'...")
            item = (
                self.service.files()
                .copy(
                    fileId=file_id,
                    body={"parents": [to_folder_id]},
                    fields=FILE_FIELDS,
                    supportsAllDrives=True,
                )
                .execute()
            )
            return FileHandle.from_drive(item)
        except HttpError as e:
            logging.error(
                f"Failed to copy file ID '{file_id}' to folder ID '{to_folder_id}': {e}"
            )
            raise

    def create_directory(self, name: str, parents: List[str]) -> FileHandle:
        """
        Creates a folder under the given parents. Drive assigns the new ID.
        """
        folder_metadata = {
            "name": name,
            "mimeType": FOLDER_MIME_TYPE,
            "parents": parents,
        }
        try:
            item = (
                self.service.files()
                .create(body=folder_metadata, fields=FILE_FIELDS, supportsAllDrives=True)
                .execute()
            )
            logging.info(f"Created folder '{name}' with ID: {item.get('id')}")
            return FileHandle.from_drive(item)
        except HttpError as e:
            logging.error(f"Failed to create folder '{name}': {e}")
            raise

    def rename(self, file_id: str, name: str) -> None:
        """
        Renames a file or folder by updating its metadata.
        """
        try:
            logging.info(f"Renaming file ID '{file_id}' to '{name}'...")
            self.service.files().update(
                fileId=file_id,
                body={"name": name},
                fields="id, name",
                supportsAllDrives=True,
            ).execute()
        except HttpError as e:
            logging.error(f"Failed to rename file ID '{file_id}' to '{name}': {e}")
            raise

    def get_account_email(self) -> str:
        try:
            about = self.service.about().get(fields="user").execute()
            return about["user"]["emailAddress"]
        except HttpError as e:
            logging.error(f"Failed to get the Google Drive account owner: {e}")
            raise
