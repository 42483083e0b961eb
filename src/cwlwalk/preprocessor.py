import logging
import re
import uuid
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from .cwlwalk_types import DocumentNode, EntryType, SourceFile, Yaml
from .exceptions import CWL_RECURSIVE_ERROR, RecursionLimitError
from .source_store import SourceStore
from .utils import (IMPORT_KEYS, INCLUDE_KEYS, MIXIN_KEYS, convert_relative_path_to_absolute_path,
                    find_string, remove_key, strip_leading_slashes)
from .utils_yaml import load_descriptor

logger = logging.getLogger('cwlwalk.preprocessor')

DEFAULT_MAX_DEPTH = 10
DEFAULT_MAX_CHAR_COUNT = 4 * 1024 * 1024
DEFAULT_MAX_FILE_COUNT = 1000

ENTRY_CLASSES = [entry_type.value for entry_type in EntryType]

FILE_URL_PREFIX = re.compile(r'^file:/*')


class PreprocessorConfig(BaseModel):
    """The limits which bound the cost of expanding a (possibly recursive) descriptor."""

    max_depth: int = Field(DEFAULT_MAX_DEPTH, gt=0, description='The maximum file depth')
    max_char_count: int = Field(DEFAULT_MAX_CHAR_COUNT, gt=0,
                                description='The maximum total number of characters loaded')
    max_file_count: int = Field(DEFAULT_MAX_FILE_COUNT, gt=0,
                                description='The maximum total number of file loads attempted')


class Preprocessor():
    """Expands a CWL descriptor, replacing $import, $include, $mixin, and run: directives
    per https://www.commonwl.org/v1.2/Workflow.html with the contents of the referenced
    source files.

    - $import is replaced by the parsed and (recursively) preprocessed file contents,
      or by the empty map if the file does not exist.
    - $include is replaced by the literal file contents, or by the empty string.
    - $mixin (v1.0 only) merges the keys of the referenced map into the containing map;
      keys that already exist in the containing map are never overwritten.
    - run: {$import: file} is normalized to run: file, and run: file is replaced by the
      preprocessed file contents. If the file does not exist, the string is left unchanged.

    Every entry (Workflow, CommandLineTool, ExpressionTool) encountered is given a unique id,
    and the id -> file path relationship is recorded so that get_path() can later report
    which file an entry came from.

    The expansion is bounded by three independent limits (file depth, total number of
    characters loaded, and total number of files loaded), any of which calls handle_max().
    A Preprocessor instance is one-time-use: create a new one for each root descriptor.
    """

    def __init__(self, source_files: Union[SourceStore, Iterable[SourceFile]],
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 max_char_count: int = DEFAULT_MAX_CHAR_COUNT,
                 max_file_count: int = DEFAULT_MAX_FILE_COUNT) -> None:
        self.source_store = source_files if isinstance(source_files, SourceStore) else SourceStore(source_files)
        self.id_to_path: Dict[str, str] = {}
        self.char_count = 0
        self.file_count = 0
        self.max_depth = max_depth
        self.max_char_count = max_char_count
        self.max_file_count = max_file_count

    @classmethod
    def from_config(cls, source_files: Union[SourceStore, Iterable[SourceFile]],
                    config: PreprocessorConfig) -> 'Preprocessor':
        return cls(source_files, config.max_depth, config.max_char_count, config.max_file_count)

    def preprocess(self, cwl: DocumentNode, current_path: str,
                   version: Optional[str] = None, depth: int = 0) -> DocumentNode:
        """Recursively expands the given CWL, possibly (but not necessarily) in place.

        Args:
            cwl (DocumentNode): The parsed file contents, or a fragment thereof
            current_path (str): The path of the file that cwl came from
            version (Optional[str]): The cwlVersion of the nearest enclosing entry, if any
            depth (int): The file depth; the root file is at depth 0, and each\n
            $import, $mixin, and run: increases the depth by one.

        Raises:
            RecursionLimitError: If any of the limits is exceeded
            CwlParseError: If a referenced file cannot be parsed

        Returns:
            DocumentNode: The expanded CWL
        """
        if depth > self.max_depth:
            self.handle_max(f'maximum file depth ({self.max_depth}) exceeded', current_path)

        if isinstance(cwl, Dict):
            if self.is_entry(cwl):
                self.id_to_path[self.set_unique_id_if_absent(cwl)] = strip_leading_slashes(current_path)
                cwl_version = cwl.get('cwlVersion')
                if cwl_version is not None:
                    version = str(cwl_version)

            import_path = find_string(IMPORT_KEYS, cwl)
            if import_path is not None:
                imported = self.load_file_and_preprocess(self.resolve_path(import_path, current_path), version, depth)
                return {} if imported is None else imported

            include_path = find_string(INCLUDE_KEYS, cwl)
            if include_path is not None:
                included = self.load_file(self.resolve_path(include_path, current_path))
                return '' if included is None else included

            if self.supports_mixin(version):
                mixin_path = find_string(MIXIN_KEYS, cwl)
                if mixin_path is not None:
                    mixin = self.load_file_and_preprocess(self.resolve_path(mixin_path, current_path), version, depth)
                    if mixin is None:
                        mixin = {}
                    if isinstance(mixin, Dict):
                        remove_key(MIXIN_KEYS, cwl)
                        self.apply_mixin(cwl, mixin)

            self.preprocess_map_values(cwl, current_path, version, depth)

        elif isinstance(cwl, List):
            self.preprocess_list_values(cwl, current_path, version, depth)

        return cwl

    def preprocess_map_values(self, cwl: Yaml, current_path: str, version: Optional[str], depth: int) -> None:
        # Convert run: {$import: file} to run: file
        run_value = cwl.get('run')
        if isinstance(run_value, Dict):
            import_value = find_string(IMPORT_KEYS, run_value)
            if import_value is not None:
                cwl['run'] = import_value

        for key, val in cwl.items():
            cwl[key] = self.preprocess(val, current_path, version, depth)

        # Expand run: file, but leave it unchanged if the file does not exist.
        run_value = cwl.get('run')
        if isinstance(run_value, str):
            expanded = self.load_file_and_preprocess(self.resolve_path(run_value, current_path), version, depth)
            if expanded is not None:
                cwl['run'] = expanded

    def preprocess_list_values(self, cwl: List[Any], current_path: str, version: Optional[str], depth: int) -> None:
        for i, val in enumerate(cwl):
            cwl[i] = self.preprocess(val, current_path, version, depth)

    def is_entry(self, cwl: Yaml) -> bool:
        return cwl.get('class') in ENTRY_CLASSES

    def set_unique_id_if_absent(self, entry_cwl: Yaml) -> str:
        current_id = entry_cwl.get('id')
        if not isinstance(current_id, str) or current_id in self.id_to_path:
            entry_cwl['id'] = str(uuid.uuid4())
        return str(entry_cwl['id'])

    def supports_mixin(self, version: Optional[str]) -> bool:
        return version is not None and version.startswith('v1.0')

    def apply_mixin(self, to: Yaml, mixin: Yaml) -> None:
        for key, val in mixin.items():
            to.setdefault(key, val)

    def resolve_path(self, child_path: str, parent_path: str) -> Optional[str]:
        """Resolves a referenced path relative to the file which references it.

        Args:
            child_path (str): The path found in a directive
            parent_path (str): The path of the file containing the directive

        Returns:
            Optional[str]: The absolute path, or None for http(s) urls (which are never fetched)
        """
        if child_path.startswith('http://') or child_path.startswith('https://'):
            return None
        if child_path.startswith('file:'):
            # The path in a file url is always absolute.
            # See https://datatracker.ietf.org/doc/html/rfc8089
            child_path = FILE_URL_PREFIX.sub('/', child_path, count=1)
        return convert_relative_path_to_absolute_path(parent_path, child_path)

    def load_file(self, load_path: Optional[str]) -> Optional[str]:
        """Returns the contents of the given file, or None if it is not in the source store.
        Every call counts towards the file limit, whether or not the file is found.
        """
        self.file_count += 1
        if self.file_count > self.max_file_count:
            self.handle_max(f'maximum file count ({self.max_file_count}) exceeded', load_path)

        content = self.source_store.get(load_path)
        if content is None:
            logger.debug(f'{load_path} not found')
            return None
        self.char_count += len(content)
        if self.char_count > self.max_char_count:
            self.handle_max(f'maximum character count ({self.max_char_count}) exceeded', load_path)
        return content

    def load_file_and_preprocess(self, load_path: Optional[str], version: Optional[str],
                                 depth: int) -> Optional[DocumentNode]:
        content = self.load_file(load_path)
        if content is None:
            return None
        # load_path cannot be None here, since http(s) urls are never found.
        return self.preprocess(load_descriptor(content, load_path), str(load_path), version, depth + 1)

    def handle_max(self, message: str, path: Optional[str] = None) -> None:
        """Called when one of the limits (file depth, character count, file count) is exceeded.
        Subclasses may override this to return instead of raise, in which case preprocessing continues.

        Args:
            message (str): Describes which limit was exceeded
            path (Optional[str]): The file being processed when the limit was exceeded

        Raises:
            RecursionLimitError: Always, in this implementation
        """
        full_message = CWL_RECURSIVE_ERROR + message
        logger.error(full_message)
        raise RecursionLimitError(full_message, path)

    def get_path(self, entry_id: Optional[str]) -> Optional[str]:
        """Returns the path of the file that contained the entry with the given id."""
        if entry_id is None:
            return None
        return self.id_to_path.get(entry_id)
