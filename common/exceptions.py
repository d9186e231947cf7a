"""Exception hierarchy shared by the file server and the transfer client."""


class FileServiceError(Exception):
    """
    Base exception class for all file service errors.
    """
    exit_code = 1


class StoredFileNotFoundError(FileServiceError):
    """
    Raised when a requested file does not exist under the storage root.
    """
    exit_code = 3


class InvalidFileNameError(FileServiceError):
    """
    Raised when a file name is empty or does not denote a flat entry
    under the storage root.
    """
    exit_code = 2


class LocalIOError(FileServiceError):
    """
    Raised when opening, reading or writing a local file fails.
    """
    exit_code = 4


class ChannelError(FileServiceError):
    """
    Raised when sending or receiving on the chunk channel fails,
    including undecodable messages and any unexpected RPC status.
    """
    exit_code = 5


class UsageError(FileServiceError):
    """
    Raised when the driver is invoked with an unknown command or
    a wrong number of arguments.
    """
    exit_code = 2


class InvalidSessionTransitionError(FileServiceError):
    """
    Raised when an upload session receives an event its current
    state does not accept.
    """
    pass
