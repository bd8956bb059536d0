# tests/conftest.py
import pytest
from unittest.mock import MagicMock

from drivectl.config import Settings, get_settings
from drivectl.storage.base import StorageClient
from drivectl.storage.dto import FOLDER_MIME_TYPE, FileHandle, ListSortOrder


class FakeApiError(Exception):
    """Stands in for a provider SDK error (HttpError, ApiError)."""


class FakeDrive(StorageClient):
    """
    In-memory StorageClient.

    Children are listed in insertion order. Every call is recorded in `calls`
    as a tuple `(operation, *arguments)`; `fail(operation, value)` makes every
    call of that operation that receives `value` raise FakeApiError.
    Copies are named with `copy_prefix` to mimic backends that do not keep
    the original name on copy.
    """

    MUTATIONS = ("copy_file", "create_directory", "rename")

    def __init__(self, copy_prefix="Copy of "):
        self.entries = {}
        self.children = {}
        self.contents = {}
        self.calls = []
        self.failures = {}
        self.copy_prefix = copy_prefix
        self._counter = 0

    def _new_key(self, prefix):
        self._counter += 1
        return f"{prefix}{self._counter}"

    def add_folder(self, name, parent=None, folder_id=None):
        folder_id = folder_id or self._new_key("folder-")
        self.entries[folder_id] = FileHandle(
            id=folder_id,
            name=name,
            mime_type=FOLDER_MIME_TYPE,
            parents=[parent] if parent else [],
        )
        self.children[folder_id] = []
        if parent is not None:
            self.children[parent].append(folder_id)
        return folder_id

    def add_file(self, name, parent, content="", file_id=None):
        file_id = file_id or self._new_key("file-")
        self.entries[file_id] = FileHandle(
            id=file_id, name=name, mime_type="text/plain", parents=[parent]
        )
        self.contents[file_id] = content
        self.children[parent].append(file_id)
        return file_id

    def add_entry(self, handle, parent):
        """Adds a raw listing entry, e.g. one without an id or a name."""
        key = self._new_key("raw-")
        self.entries[key] = handle
        self.children[parent].append(key)

    def fail(self, operation, value):
        self.failures[(operation, value)] = FakeApiError(f"{operation} failed for {value}")

    def mutations(self):
        return [call for call in self.calls if call[0] in self.MUTATIONS]

    def tree(self, folder_id):
        """Nested {name: subtree} dict for folders, {name: content} for files."""
        result = {}
        for key in self.children[folder_id]:
            entry = self.entries[key]
            if entry.is_directory:
                result[entry.name] = self.tree(key)
            else:
                result[entry.name] = self.contents[key]
        return result

    def _record(self, operation, *args):
        self.calls.append((operation, *args))
        for value in args:
            if isinstance(value, str) and (operation, value) in self.failures:
                raise self.failures[(operation, value)]

    def get_file(self, file_id):
        self._record("get_file", file_id)
        if file_id not in self.entries:
            raise FakeApiError(f"File not found: {file_id}")
        return self.entries[file_id]

    def list_files(
        self, folder_id, order_by=ListSortOrder.FOLDER_MODIFIED_NAME, max_files=1000
    ):
        self._record("list_files", folder_id, order_by, max_files)
        return [self.entries[key] for key in self.children[folder_id]][:max_files]

    def copy_file(self, file_id, to_folder_id):
        self._record("copy_file", file_id, to_folder_id)
        source = self.entries[file_id]
        new_id = self.add_file(
            self.copy_prefix + source.name, to_folder_id, self.contents[file_id]
        )
        return self.entries[new_id]

    def create_directory(self, name, parents):
        self._record("create_directory", name, parents)
        return self.entries[self.add_folder(name, parents[0])]

    def rename(self, file_id, name):
        self._record("rename", file_id, name)
        self.entries[file_id] = self.entries[file_id].model_copy(update={"name": name})

    def get_account_email(self):
        return "fake@example.com"


@pytest.fixture
def fake_drive():
    return FakeDrive()


@pytest.fixture
def mock_settings(tmp_path):
    """
    Provides a mock of the application settings for testing.
    This avoids the need for environment variables during tests and keeps the
    account store inside a temporary directory.
    """
    config_dir = tmp_path / "config"
    settings = MagicMock(spec=Settings)
    settings.CONFIG_DIR = config_dir
    settings.ACCOUNTS_DIR = config_dir / "accounts"
    settings.CURRENT_ACCOUNT_FILE = config_dir / "current_account"
    settings.DEFAULT_PROVIDER = "gdrive"
    settings.LOG_LEVEL = "INFO"
    settings.LOG_FILE = None
    settings.GDRIVE_CREDENTIALS_JSON = None
    settings.DROPBOX_APP_KEY = "test_key"
    settings.DROPBOX_APP_SECRET = "test_secret"
    return settings


@pytest.fixture
def mock_storage_client():
    """Fixture for a mock storage client."""
    return MagicMock(spec=StorageClient)


@pytest.fixture(autouse=True)
def patch_settings_class(monkeypatch, mock_settings):
    """
    This autouse fixture automatically replaces the `Settings` class constructor.
    Any part of the app code that calls `Settings()` during a test run will
    receive the `mock_settings` instance instead of a real settings object.
    """
    # Clear the cache on get_settings, because it might have been
    # called and cached a real instance during test collection.
    get_settings.cache_clear()
    monkeypatch.setattr("drivectl.config.Settings", lambda *args, **kwargs: mock_settings)
    yield
    get_settings.cache_clear()
