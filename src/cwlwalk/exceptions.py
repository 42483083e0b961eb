"""Exceptions raised while expanding and walking CWL descriptors."""
from typing import Optional

CWL_VERSION_PREFIX = 'v1'
CWL_PARSE_ERROR = 'Unable to parse CWL workflow, '
CWL_VERSION_ERROR = f'CWL descriptor should contain a cwlVersion starting with {CWL_VERSION_PREFIX}, detected version '
CWL_NO_VERSION_ERROR = 'CWL descriptor should contain a cwlVersion'
CWL_PARSE_SECONDARY_ERROR = 'Syntax incorrect. Could not ($)import or ($)include secondary file for run command: '
CWL_RECURSIVE_ERROR = 'CWL might be recursive: '
CWL_MALFORMED_ERROR = 'CWL file is malformed'


class CwlError(Exception):
    """Base class for every fatal error in this package.

    Callers typically report these to the end user as an unprocessable
    descriptor (i.e. HTTP 422), so none of them should be retried.
    """
    kind = 'CwlError'

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.message = message
        self.path = path
        full_msg = message if path is None else f'{message} ({path})'
        super().__init__(full_msg)


class CwlParseError(CwlError):
    kind = 'ParseError'


class MissingVersionError(CwlError):
    kind = 'MissingVersion'


class UnsupportedVersionError(CwlError):
    kind = 'UnsupportedVersion'


class RecursionLimitError(CwlError):
    """Raised when any of the depth, character count, or file count limits is exceeded."""
    kind = 'RecursionLimitExceeded'


class UnhandledRunTargetError(CwlError):
    kind = 'UnhandledRunTarget'


class MalformedDescriptorError(CwlError):
    """The root descriptor did not expand to a map."""
    kind = 'Malformed'
