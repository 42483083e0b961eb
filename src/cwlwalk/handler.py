import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

import networkx as nx

from . import classifier, imports, metadata, utils_graphs
from .cwlwalk_types import (Cwl, EntryType, Json, OutputMode, ParsedInformation, SourceFile, VersionTypeValidation,
                            WalkResult)
from .docker import ToolLookup
from .exceptions import CWL_MALFORMED_ERROR, CwlError, CwlParseError, MalformedDescriptorError
from .preprocessor import Preprocessor, PreprocessorConfig
from .source_store import SourceStore
from .utils_yaml import load_descriptor
from .walker import WorkflowWalker

logger = logging.getLogger('cwlwalk.handler')

WORKFLOW_EMPTY_ERROR = 'Primary descriptor is empty.'
TOOL_EMPTY_ERROR = 'Primary CWL descriptor is empty.'
NOT_PRESENT_ERROR = 'Primary CWL descriptor is not present.'
INVALID_VERSION_ERROR = 'Invalid CWL version.'
WORKFLOW_CLASS_ERROR = "A CWL workflow requires 'class: Workflow'."
TOOL_CLASS_ERROR = "A CWL tool requires 'class: CommandLineTool' or 'class: ExpressionTool'."
TEST_PARAMETER_ERROR = 'Test parameter file is not valid JSON or YAML: '

SourceFiles = Union[SourceStore, Iterable[SourceFile]]


class CwlHandler():
    """Expands and analyzes the CWL descriptors of one repository. Every method creates its own
    Preprocessor, so a single CwlHandler can be shared between concurrent invocations.
    """

    def __init__(self, config: Optional[PreprocessorConfig] = None,
                 tool_lookup: Optional[ToolLookup] = None) -> None:
        self.config = config or PreprocessorConfig()
        self.tool_lookup = tool_lookup

    def preprocess_root(self, root_path: str, root_content: str,
                        source_files: SourceFiles) -> Tuple[Cwl, Preprocessor]:
        """Parses and expands a root descriptor

        Args:
            root_path (str): The absolute path of the root descriptor
            root_content (str): The contents of the root descriptor
            source_files (SourceFiles): The other files of the repository

        Raises:
            CwlParseError: If any referenced file is not valid yaml / json
            RecursionLimitError: If the descriptor might be recursive
            MalformedDescriptorError: If the root does not expand to a map
            MissingVersionError: If there is no cwlVersion
            UnsupportedVersionError: If the cwlVersion does not start with v1

        Returns:
            Tuple[Cwl, Preprocessor]: The expanded root, and the Preprocessor used to expand it
        """
        preprocessor = Preprocessor.from_config(source_files, self.config)
        cwl = preprocessor.preprocess(load_descriptor(root_content, root_path), root_path)
        if not isinstance(cwl, Dict):
            logger.error(CWL_MALFORMED_ERROR)
            raise MalformedDescriptorError(CWL_MALFORMED_ERROR, root_path)
        classifier.check_cwl_version(cwl, root_path)
        return (cwl, preprocessor)

    def walk(self, root_path: str, root_content: str, source_files: SourceFiles,
             mode: OutputMode = OutputMode.DAG) -> Tuple[Cwl, WalkResult]:
        (cwl, preprocessor) = self.preprocess_root(root_path, root_content, source_files)
        walker = WorkflowWalker(preprocessor, mode, self.tool_lookup)
        result = walker.walk(cwl)
        if mode == OutputMode.DAG:
            utils_graphs.add_synthetic_nodes(cwl, result)
        return (cwl, result)

    def get_dag(self, root_path: str, root_content: str, source_files: SourceFiles) -> nx.DiGraph:
        (_, result) = self.walk(root_path, root_content, source_files, OutputMode.DAG)
        return utils_graphs.build_dag(result)

    def get_content(self, root_path: str, root_content: str, source_files: SourceFiles,
                    mode: OutputMode = OutputMode.DAG) -> Union[Json, List[Json]]:
        """Returns either the DAG (in cytoscape json format) or the tool table of a workflow.

        Args:
            root_path (str): The absolute path of the root descriptor
            root_content (str): The contents of the root descriptor
            source_files (SourceFiles): The other files of the repository
            mode (OutputMode): DAG or TOOLS

        Raises:
            CwlError: If the workflow cannot be expanded or walked. See preprocess_root()

        Returns:
            Union[Json, List[Json]]: The DAG or the tool table, as plain json serializable data
        """
        (_, result) = self.walk(root_path, root_content, source_files, mode)
        if mode == OutputMode.DAG:
            return utils_graphs.dag_to_cytoscape(utils_graphs.build_dag(result))
        return utils_graphs.tool_table(result)

    def parse_workflow_content(self, file_path: str, content: str,
                               source_files: SourceFiles = ()) -> metadata.DescriptorMetadata:
        return metadata.parse_workflow_content(file_path, content, source_files, self.config)

    def get_file_formats(self, content: str, parameter_type: str) -> Set[str]:
        return metadata.get_file_formats(content, parameter_type)

    def process_imports(self, file_path: str, content: str,
                        source_files: SourceFiles) -> Tuple[List[SourceFile], ParsedInformation]:
        """Returns the files transitively referenced by a descriptor, and whether any of the
        references are http(s) urls or local files. See imports.find_imports()"""
        return imports.find_imports(file_path, content, self.as_store(source_files))

    def as_store(self, source_files: SourceFiles) -> SourceStore:
        return source_files if isinstance(source_files, SourceStore) else SourceStore(source_files)

    def get_primary_descriptor(self, source_files: SourceFiles, primary_path: str) -> Optional[SourceFile]:
        return self.as_store(source_files).get_file(primary_path)

    def validate_entry_set(self, source_files: SourceFiles, primary_path: str,
                           entry_types: List[EntryType], empty_error: str, class_error: str) -> VersionTypeValidation:
        primary = self.get_primary_descriptor(source_files, primary_path)
        if primary is None:
            return VersionTypeValidation(False, {primary_path: NOT_PRESENT_ERROR})
        if not primary.content.strip():
            return VersionTypeValidation(False, {primary_path: empty_error})

        try:
            cwl: Any = load_descriptor(primary.content, primary_path)
        except CwlParseError as ex:
            return VersionTypeValidation(False, {primary_path: metadata.CWL_METADATA_ERROR + ex.message})

        entry_type = classifier.classify(cwl)
        if entry_type not in entry_types:
            message = class_error
            if entry_type is not None:
                suggestion = 'workflow' if entry_type == EntryType.WORKFLOW else 'tool'
                message += f" This file contains 'class: {entry_type.value}'. Did you mean to register a {suggestion}?"
            return VersionTypeValidation(False, {primary_path: message})

        if not classifier.is_valid_cwl_version(cwl):
            return VersionTypeValidation(False, {primary_path: INVALID_VERSION_ERROR})
        return VersionTypeValidation(True, {})

    def validate_workflow_set(self, source_files: SourceFiles, primary_path: str) -> VersionTypeValidation:
        """Checks that the primary descriptor is present, is a CWL Workflow, and has a valid cwlVersion.
        Problems are reported as validation messages (keyed by file path), never raised.
        """
        return self.validate_entry_set(source_files, primary_path, [EntryType.WORKFLOW],
                                       WORKFLOW_EMPTY_ERROR, WORKFLOW_CLASS_ERROR)

    def validate_tool_set(self, source_files: SourceFiles, primary_path: str) -> VersionTypeValidation:
        """Like validate_workflow_set, but for CommandLineTools and ExpressionTools."""
        return self.validate_entry_set(source_files, primary_path,
                                       [EntryType.COMMAND_LINE_TOOL, EntryType.EXPRESSION_TOOL],
                                       TOOL_EMPTY_ERROR, TOOL_CLASS_ERROR)

    def validate_test_parameter_set(self, source_files: Iterable[SourceFile]) -> VersionTypeValidation:
        """Checks that every test parameter file is valid JSON or YAML."""
        messages: Dict[str, str] = {}
        for source_file in source_files:
            try:
                load_descriptor(source_file.content, source_file.absolute_path)
            except CwlError as ex:
                messages[source_file.absolute_path] = TEST_PARAMETER_ERROR + ex.message
        return VersionTypeValidation(not messages, messages)
