# main.py
import argparse
import logging
import sys
from typing import Optional, Sequence

from . import account
from .config import get_settings
from .copy_folder import copy_file, copy_folder
from .exceptions import CommandError, PermanentError
from .hub import get_hub
from .storage.dto import FileHandle, ListSortOrder


def setup_logging(debug: bool = False):
    """Configures logging to stderr and, when LOG_FILE is set, to a file."""
    settings = get_settings()
    log_level_name = "DEBUG" if debug else settings.LOG_LEVEL.upper()

    # Get the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_name)

    # Clear any existing handlers to prevent duplicate logs on re-runs or implicit configs
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Add StreamHandler (stderr, stdout is reserved for command output)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if settings.LOG_FILE:
        try:
            file_handler = logging.FileHandler(settings.LOG_FILE)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except IOError as e:
            root_logger.error(f"Failed to set up file logging to {settings.LOG_FILE}: {e}")

    # Reducing "noise" from third-party libraries
    logging.getLogger("dropbox").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def _print_file(handle: FileHandle):
    print(f"Id: {handle.id}")
    print(f"Name: {handle.name}")
    print(f"Mime: {handle.mime_type}")
    if handle.size is not None:
        print(f"Size: {handle.size}")
    if handle.modified_time is not None:
        print(f"Modified: {handle.modified_time.isoformat()}")
    if handle.parents:
        print(f"Parents: {', '.join(handle.parents)}")


# --- account commands ---


def cmd_account_add(args):
    provider = args.provider or get_settings().DEFAULT_PROVIDER
    added = account.add_account(provider, args.name)
    print(f"Saved account '{added.name}' and made it the current account.")


def cmd_account_list(args):
    names = account.list_accounts()
    if not names:
        print("No accounts found")
        print("Use `drivectl account add` to add an account.")
        return
    current = account.get_current_account_name()
    for name in names:
        marker = "*" if name == current else " "
        print(f"{marker} {name}")


def cmd_account_current(args):
    if not account.list_accounts():
        print("No accounts found")
        print("Use `drivectl account add` to add an account.")
    elif not account.has_current_account():
        print("No account has been selected")
        print("Use `drivectl account list` to show all accounts.")
        print("Use `drivectl account switch` to select an account.")
    else:
        print(account.load_current_account().name)


def cmd_account_switch(args):
    account.switch_account(args.name)
    print(f"Switched to account '{args.name}'")


def cmd_account_remove(args):
    account.remove_account(args.name)
    print(f"Removed account '{args.name}'")


# --- files commands ---


def cmd_files_info(args):
    hub = get_hub()
    try:
        handle = hub.get_file(args.file_id)
    except Exception as e:
        raise CommandError(f"Failed to get file: {e}") from e
    _print_file(handle)


def cmd_files_list(args):
    hub = get_hub()
    order_by = ListSortOrder[args.order_by.upper()]
    try:
        handles = hub.list_files(args.parent, order_by=order_by, max_files=args.max)
    except Exception as e:
        raise CommandError(f"Failed to list files: {e}") from e
    for handle in handles:
        kind = "folder" if handle.is_directory else "file"
        print(f"{handle.id}\t{kind}\t{handle.name}")


def cmd_files_mkdir(args):
    hub = get_hub()
    try:
        folder = hub.create_directory(args.name, parents=args.parent or ["root"])
    except Exception as e:
        raise CommandError(f"Failed creating folder: {e}") from e
    print(folder.id)


def cmd_files_rename(args):
    hub = get_hub()
    try:
        hub.rename(args.file_id, args.name)
    except Exception as e:
        raise CommandError(f"Failed renaming file: {e}") from e
    print(f"Renamed {args.file_id} to '{args.name}'")


def cmd_files_copy(args):
    hub = get_hub()
    if args.recursive:
        stats = copy_folder(hub, args.file_id, args.folder_id)
        print(
            f"Copied {stats.files_copied} files and {stats.folders_created} folders into {args.folder_id}"
        )
    else:
        new_file = copy_file(hub, args.file_id, args.folder_id)
        print(new_file.id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drivectl",
        description="Manage cloud storage accounts, files and folders.",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log everything at DEBUG level."
    )
    groups = parser.add_subparsers(dest="group", required=True)

    account_parser = groups.add_parser("account", help="Manage accounts.")
    account_commands = account_parser.add_subparsers(dest="command", required=True)

    add = account_commands.add_parser("add", help="Authorize and add an account.")
    add.add_argument(
        "--provider",
        choices=["gdrive", "dropbox"],
        default=None,
        help="Storage provider (defaults to DRIVECTL_DEFAULT_PROVIDER).",
    )
    add.add_argument("--name", help="Account name (defaults to the account email).")
    add.set_defaults(func=cmd_account_add)

    account_commands.add_parser("list", help="List accounts.").set_defaults(
        func=cmd_account_list
    )
    account_commands.add_parser("current", help="Print the current account.").set_defaults(
        func=cmd_account_current
    )

    switch = account_commands.add_parser("switch", help="Select the current account.")
    switch.add_argument("name")
    switch.set_defaults(func=cmd_account_switch)

    remove = account_commands.add_parser("remove", help="Remove an account.")
    remove.add_argument("name")
    remove.set_defaults(func=cmd_account_remove)

    files_parser = groups.add_parser("files", help="Manage files and folders.")
    files_commands = files_parser.add_subparsers(dest="command", required=True)

    info = files_commands.add_parser("info", help="Show file metadata.")
    info.add_argument("file_id")
    info.set_defaults(func=cmd_files_info)

    list_parser = files_commands.add_parser("list", help="List the children of a folder.")
    list_parser.add_argument("--parent", default="root", help="Folder ID (default: root).")
    list_parser.add_argument("--max", type=int, default=30, help="Maximum number of entries.")
    list_parser.add_argument(
        "--order-by",
        choices=[order.name.lower() for order in ListSortOrder],
        default=ListSortOrder.FOLDER_MODIFIED_NAME.name.lower(),
    )
    list_parser.set_defaults(func=cmd_files_list)

    mkdir = files_commands.add_parser("mkdir", help="Create a folder.")
    mkdir.add_argument("name")
    mkdir.add_argument(
        "--parent", action="append", help="Parent folder ID (repeatable, default: root)."
    )
    mkdir.set_defaults(func=cmd_files_mkdir)

    rename = files_commands.add_parser("rename", help="Rename a file or folder.")
    rename.add_argument("file_id")
    rename.add_argument("name")
    rename.set_defaults(func=cmd_files_rename)

    copy = files_commands.add_parser("copy", help="Copy a file or folder into a folder.")
    copy.add_argument("file_id")
    copy.add_argument("folder_id")
    copy.add_argument(
        "-r", "--recursive", action="store_true", help="Copy a folder and everything in it."
    )
    copy.set_defaults(func=cmd_files_copy)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug)

    try:
        args.func(args)
    except PermanentError as e:
        logging.debug(f"Command failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logging.critical(f"An unexpected error occurred: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
