"""Custom exceptions for the mail repository key index."""


class MailKeyIndexError(Exception):
    """Base exception for all mail key index errors."""


class StorageError(MailKeyIndexError):
    """Exception raised when the backing store fails a request."""


class StorageUnavailable(StorageError):
    """Exception raised when no Cassandra node can serve the request."""


class StorageTimeout(StorageError):
    """Exception raised when a request exceeds its deadline."""


class InvalidArgument(MailKeyIndexError):
    """Exception raised when the store rejects a repository name or mail key."""


class ConfigurationError(MailKeyIndexError):
    """Exception raised for configuration related errors."""
