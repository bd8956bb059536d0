# exceptions.py

class PermanentError(Exception):
    """An error that will not be fixed by a retry (e.g., a missing folder)."""
    pass

class HubError(PermanentError):
    """The authenticated storage client could not be created."""
    pass

class AccountError(PermanentError):
    """The local account store is missing, unreadable or inconsistent."""
    pass

class CommandError(PermanentError):
    """A single remote operation requested from the command line failed."""
    pass
