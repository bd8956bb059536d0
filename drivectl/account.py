# account.py
import logging
import shutil
from typing import List, Literal, Optional

from pydantic import BaseModel, ValidationError

from .config import get_settings
from .exceptions import AccountError

ACCOUNT_FILE_NAME = "account.json"


class Account(BaseModel):
    """
    A stored remote account. Google Drive accounts keep the authorized-user
    token JSON, Dropbox accounts keep the OAuth refresh token.
    """

    name: str
    provider: Literal["gdrive", "dropbox"] = "gdrive"
    token_json: Optional[str] = None
    refresh_token: Optional[str] = None


def _account_file(name: str):
    if not name or "/" in name or name in (".", ".."):
        raise AccountError(f"Invalid account name '{name}'")
    return get_settings().ACCOUNTS_DIR / name / ACCOUNT_FILE_NAME


def list_accounts() -> List[str]:
    """Returns the names of all stored accounts, sorted."""
    accounts_dir = get_settings().ACCOUNTS_DIR
    if not accounts_dir.is_dir():
        return []
    try:
        return sorted(
            path.name
            for path in accounts_dir.iterdir()
            if (path / ACCOUNT_FILE_NAME).is_file()
        )
    except OSError as e:
        raise AccountError(f"Failed to list accounts in {accounts_dir}: {e}") from e


def account_exists(name: str) -> bool:
    return _account_file(name).is_file()


def load_account(name: str) -> Account:
    account_file = _account_file(name)
    try:
        return Account.model_validate_json(account_file.read_text())
    except FileNotFoundError as e:
        raise AccountError(f"Account '{name}' not found") from e
    except (OSError, ValidationError) as e:
        raise AccountError(f"Failed to read account '{name}': {e}") from e


def save_account(account: Account):
    account_file = _account_file(account.name)
    try:
        account_file.parent.mkdir(parents=True, exist_ok=True)
        account_file.write_text(account.model_dump_json(indent=2))
        account_file.chmod(0o600)
    except OSError as e:
        raise AccountError(f"Failed to save account '{account.name}': {e}") from e
    logging.info(f"Saved account '{account.name}' to {account_file}")


def get_current_account_name() -> Optional[str]:
    current_file = get_settings().CURRENT_ACCOUNT_FILE
    if not current_file.is_file():
        return None
    name = current_file.read_text().strip()
    return name or None


def has_current_account() -> bool:
    name = get_current_account_name()
    return name is not None and account_exists(name)


def load_current_account() -> Account:
    name = get_current_account_name()
    if name is None:
        raise AccountError("No account has been selected")
    return load_account(name)


def switch_account(name: str):
    if not account_exists(name):
        raise AccountError(f"Account '{name}' not found")
    try:
        get_settings().CURRENT_ACCOUNT_FILE.write_text(name)
    except OSError as e:
        raise AccountError(f"Failed to select account '{name}': {e}") from e
    logging.info(f"Switched to account '{name}'")


def remove_account(name: str):
    account_file = _account_file(name)
    if not account_file.is_file():
        raise AccountError(f"Account '{name}' not found")
    was_current = get_current_account_name() == name
    try:
        shutil.rmtree(account_file.parent)
        if was_current:
            get_settings().CURRENT_ACCOUNT_FILE.unlink()
    except OSError as e:
        raise AccountError(f"Failed to remove account '{name}': {e}") from e
    logging.info(f"Removed account '{name}'")


def add_account(provider: str, name: Optional[str] = None) -> Account:
    """
    Authorizes a new account interactively, stores it and makes it current.
    Without an explicit name the account is named after the remote user's email.
    """
    # hub imports this module at load time.
    from .hub import build_client

    settings = get_settings()
    if provider == "gdrive":
        from .gdrive_auth import gdrive_authenticate

        token_json = gdrive_authenticate(settings.GDRIVE_CREDENTIALS_JSON)
        if not token_json:
            raise AccountError("Google Drive authorization was not completed")
        credentials = {"token_json": token_json}
    elif provider == "dropbox":
        from .dbox_auth import get_refresh_token

        if not settings.DROPBOX_APP_KEY:
            raise AccountError("DRIVECTL_DROPBOX_APP_KEY must be set to add a Dropbox account")
        refresh_token = get_refresh_token(settings.DROPBOX_APP_KEY)
        if not refresh_token:
            raise AccountError("Dropbox authorization was not completed")
        credentials = {"refresh_token": refresh_token}
    else:
        raise AccountError(f"Unknown provider '{provider}'")

    if name is None:
        # The account has no name yet; only its credentials are needed to ask who it is.
        client = build_client(Account(name="", provider=provider, **credentials))
        try:
            name = client.get_account_email()
        except Exception as e:
            raise AccountError(f"Failed to look up the account email: {e}") from e

    account = Account(name=name, provider=provider, **credentials)
    save_account(account)
    switch_account(account.name)
    return account
