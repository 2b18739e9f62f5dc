class NirifyError(Exception):
    """Base class for nirify errors."""


class UnknownCategoryError(NirifyError, KeyError):
    """Raised when a category name or file name is not registered."""


class DocumentParseError(NirifyError):
    """Raised when KDL text cannot be parsed into a document."""


class ConfigReadError(NirifyError):
    """Raised when a config file exists but cannot be read."""


class AtomicWriteError(NirifyError):
    """Raised when a file could not be replaced atomically."""


class ConfigWriteError(NirifyError):
    """Raised when one or more category files could not be written."""


class ManagedDirectoryError(NirifyError):
    """Raised when the managed directory tree cannot be created."""


class SandboxViolation(NirifyError):
    """Raised when an include resolves outside the allowed config root."""


class IncludeDepthExceeded(NirifyError):
    """Raised when include recursion goes deeper than allowed."""


class IpcError(NirifyError):
    """Raised for failures talking to the running compositor."""
