import pytest
from unittest.mock import patch

from drivectl import account
from drivectl.account import Account
from drivectl.exceptions import HubError
from drivectl.hub import build_client, get_hub


def test_get_hub_without_account_raises_hub_error():
    with pytest.raises(HubError, match="No account has been selected"):
        get_hub()


@patch("drivectl.hub.GoogleDriveClient")
def test_get_hub_builds_gdrive_client_for_current_account(MockClient, mock_settings):
    mock_settings.GDRIVE_CREDENTIALS_JSON = '{"installed": {}}'
    account.save_account(Account(name="me", provider="gdrive", token_json='{"token": "t"}'))
    account.switch_account("me")

    hub = get_hub()

    assert hub == MockClient.return_value
    MockClient.assert_called_once_with(
        token_json='{"token": "t"}', credentials_json='{"installed": {}}'
    )


@patch("drivectl.hub.DropboxClient")
def test_build_client_dropbox(MockClient):
    hub = build_client(Account(name="me", provider="dropbox", refresh_token="r"))

    assert hub == MockClient.return_value
    MockClient.assert_called_once_with(
        app_key="test_key", app_secret="test_secret", refresh_token="r"
    )


@patch("drivectl.hub.GoogleDriveClient", side_effect=ValueError("bad token"))
def test_build_client_failure_is_wrapped(MockClient):
    with pytest.raises(HubError, match="bad token") as exc_info:
        build_client(Account(name="me", provider="gdrive", token_json="{}"))

    assert isinstance(exc_info.value.__cause__, ValueError)


def test_build_client_missing_credentials():
    with pytest.raises(HubError, match="has no Dropbox refresh token"):
        build_client(Account(name="me", provider="dropbox"))
