import logging
from typing import Any, Dict, List, Set, Tuple

from .cwlwalk_types import ParsedInformation, SourceFile
from .exceptions import CwlParseError
from .source_store import SourceStore
from .utils import (IMPORT_KEYS, INCLUDE_KEYS, MIXIN_KEYS, convert_relative_path_to_absolute_path,
                    is_http_url, normalize_path)
from .utils_yaml import load_descriptor

logger = logging.getLogger('cwlwalk.imports')

REFERENCE_KEYS = IMPORT_KEYS + INCLUDE_KEYS + MIXIN_KEYS + ['run']


def find_references(cwl: Any, references: List[str]) -> None:
    """Collects every file referenced by a directive or a run: string (mutably appended)

    Args:
        cwl (Any): A parsed (but not preprocessed) descriptor, or a fragment thereof
        references (List[str]): The list to which the references are appended
    """
    if isinstance(cwl, Dict):
        for key, val in cwl.items():
            if isinstance(key, str) and key.lower() in REFERENCE_KEYS and isinstance(val, str):
                references.append(val)
            else:
                find_references(val, references)
    elif isinstance(cwl, List):
        for val in cwl:
            find_references(val, references)


def find_imports(file_path: str, content: str,
                 source_store: SourceStore) -> Tuple[List[SourceFile], ParsedInformation]:
    """Transitively discovers the files referenced by a descriptor, without expanding it.

    Args:
        file_path (str): The absolute path of the descriptor
        content (str): The contents of the descriptor
        source_store (SourceStore): The other files of the repository

    Raises:
        CwlParseError: If the root descriptor is not valid yaml / json

    Returns:
        Tuple[List[SourceFile], ParsedInformation]: The referenced files which exist in source_store
        (in discovery order, excluding the root), and whether any http(s) or local references were found
    """
    has_http_imports = False
    has_local_imports = False
    found: List[SourceFile] = []
    visited: Set[str] = {normalize_path(file_path)}
    queue: List[Tuple[str, str]] = [(file_path, content)]

    while queue:
        (current_path, current_content) = queue.pop(0)
        try:
            cwl = load_descriptor(current_content, current_path)
        except CwlParseError:
            if current_path == file_path:
                raise
            # $include-ed files (i.e. scripts) need not be yaml.
            logger.debug(f'{current_path} is not yaml, so it cannot reference any other files')
            continue

        references: List[str] = []
        find_references(cwl, references)
        for reference in references:
            if is_http_url(reference):
                has_http_imports = True
                continue
            has_local_imports = True
            if reference.startswith('file:'):
                reference = '/' + reference[len('file:'):].lstrip('/')
            absolute_path = convert_relative_path_to_absolute_path(current_path, reference)
            if absolute_path in visited:
                continue
            visited.add(absolute_path)
            source_file = source_store.get_file(absolute_path)
            if source_file is None:
                logger.info(f'Referenced file {absolute_path} not found')
                continue
            found.append(source_file)
            queue.append((source_file.absolute_path, source_file.content))

    return (found, ParsedInformation(has_http_imports, has_local_imports))
