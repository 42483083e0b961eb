import logging
from typing import Any, Optional

from .cwlwalk_types import EntryType, RunTargetType
from .exceptions import (CWL_NO_VERSION_ERROR, CWL_VERSION_ERROR, CWL_VERSION_PREFIX,
                         MissingVersionError, UnsupportedVersionError)

logger = logging.getLogger('cwlwalk.classifier')

RUN_TARGET_TYPES = {
    EntryType.WORKFLOW: RunTargetType.WORKFLOW,
    EntryType.COMMAND_LINE_TOOL: RunTargetType.TOOL,
    EntryType.EXPRESSION_TOOL: RunTargetType.EXPRESSION_TOOL,
}


def classify(cwl: Any) -> Optional[EntryType]:
    """Determines the kind of entry by the class: field alone (never by structural heuristics)

    Args:
        cwl (Any): An expanded CWL document or fragment

    Returns:
        Optional[EntryType]: The kind of entry, or None if cwl is not an entry.
    """
    if not isinstance(cwl, dict):
        return None
    cwl_class = cwl.get('class')
    if cwl_class is None:
        return None
    try:
        return EntryType(str(cwl_class))
    except ValueError:
        return None


def is_workflow(cwl: Any) -> bool:
    return classify(cwl) == EntryType.WORKFLOW


def is_tool(cwl: Any) -> bool:
    return classify(cwl) == EntryType.COMMAND_LINE_TOOL


def is_expression_tool(cwl: Any) -> bool:
    return classify(cwl) == EntryType.EXPRESSION_TOOL


def check_cwl_version(cwl: Any, path: Optional[str] = None) -> str:
    """Verifies that cwlVersion is present and starts with v1 (i.e. v1.0, v1.1, v1.2)

    Args:
        cwl (Any): An expanded root CWL document
        path (Optional[str]): The path of the document, for error reporting

    Raises:
        MissingVersionError: If there is no cwlVersion
        UnsupportedVersionError: If cwlVersion does not start with v1

    Returns:
        str: The cwlVersion
    """
    cwl_version = cwl.get('cwlVersion') if isinstance(cwl, dict) else None
    if cwl_version is None:
        logger.error(CWL_NO_VERSION_ERROR)
        raise MissingVersionError(CWL_NO_VERSION_ERROR, path)
    if not str(cwl_version).startswith(CWL_VERSION_PREFIX):
        message = CWL_VERSION_ERROR + str(cwl_version)
        logger.error(message)
        raise UnsupportedVersionError(message, path)
    return str(cwl_version)


def is_valid_cwl_version(cwl: Any) -> bool:
    """Non-raising version of check_cwl_version()"""
    try:
        check_cwl_version(cwl)
    except (MissingVersionError, UnsupportedVersionError):
        return False
    return True
