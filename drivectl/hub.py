# hub.py
import logging

from .account import Account, load_current_account
from .config import get_settings
from .dbox import DropboxClient
from .exceptions import AccountError, HubError
from .gdrive import GoogleDriveClient
from .storage.base import StorageClient


def _init_gdrive_client(account: Account, settings) -> GoogleDriveClient:
    """Initializes and returns a GoogleDriveClient."""
    if not account.token_json:
        raise HubError(f"Account '{account.name}' has no Google Drive token. Add it again.")
    try:
        return GoogleDriveClient(
            token_json=account.token_json,
            credentials_json=settings.GDRIVE_CREDENTIALS_JSON,
        )
    except Exception as e:
        raise HubError(f"Failed to initialize Google Drive client: {e}") from e


def _init_dropbox_client(account: Account, settings) -> DropboxClient:
    """Initializes and returns a DropboxClient."""
    if not account.refresh_token:
        raise HubError(f"Account '{account.name}' has no Dropbox refresh token. Add it again.")
    try:
        return DropboxClient(
            app_key=settings.DROPBOX_APP_KEY,
            app_secret=settings.DROPBOX_APP_SECRET,
            refresh_token=account.refresh_token,
        )
    except Exception as e:
        raise HubError(f"Failed to initialize Dropbox client: {e}") from e


def build_client(account: Account) -> StorageClient:
    """Builds the storage client matching the account's provider."""
    settings = get_settings()
    if account.provider == "gdrive":
        return _init_gdrive_client(account, settings)
    elif account.provider == "dropbox":
        return _init_dropbox_client(account, settings)
    raise HubError(f"Unknown storage provider: {account.provider}")


def get_hub() -> StorageClient:
    """
    Returns an authenticated storage client for the current account.

    Raises:
        HubError: If no account is selected or the client cannot be created.
    """
    try:
        account = load_current_account()
    except AccountError as e:
        raise HubError(f"{e}. Use `drivectl account add` or `drivectl account switch`.") from e

    logging.info(f"Using {account.provider} account '{account.name}'.")
    return build_client(account)
