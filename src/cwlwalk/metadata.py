"""Extracts human readable metadata (description, author) and file formats from CWL descriptors."""
import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from pydantic import BaseModel, Field

from .cwlwalk_types import SourceFile, Yaml
from .exceptions import CwlParseError
from .preprocessor import Preprocessor, PreprocessorConfig
from .source_store import SourceStore
from .utils import as_list, first_non_empty
from .utils_yaml import load_descriptor

logger = logging.getLogger('cwlwalk.metadata')

CWL_METADATA_ERROR = 'CWL file is malformed or missing, cannot extract metadata: '
MAILTO = 'mailto:'


class Author(BaseModel):
    """Author BaseModel."""

    name: Optional[str] = Field(None, description='The full name of the author', examples=['Jane Doe'])
    email: Optional[str] = Field(None, description='The email address, without mailto:',
                                 examples=['jane.doe@example.com'])


class DescriptorMetadata(BaseModel):
    """The metadata of one CWL descriptor version."""

    description: Optional[str] = Field(None, description='From doc:, else description:, else label:')
    author: Optional[Author] = Field(None, description='From s:author:, else dct:creator:')
    validation_messages: Dict[str, str] = Field(default_factory=dict,
                                                description='File path -> reason metadata could not be extracted')

    @property
    def valid(self) -> bool:
        return not self.validation_messages


def get_description(cwl: Yaml) -> Optional[str]:
    """Returns the description of the given entry.

    Args:
        cwl (Yaml): An expanded CWL document

    Returns:
        Optional[str]: The first non-empty of doc: (which may be a list of lines),
        description: (draft-3), and label:, or None
    """
    doc = cwl.get('doc')
    if isinstance(doc, List):
        doc = '\n'.join(str(line) for line in doc)
    candidates = [value if isinstance(value, str) else None
                  for value in [doc, cwl.get('description'), cwl.get('label')]]
    description = first_non_empty(*candidates)
    if description is None:
        logger.info('Description not found!')
    return description


def strip_mailto(email: Any) -> Optional[str]:
    if not isinstance(email, str):
        return None
    return email[len(MAILTO):] if email.startswith(MAILTO) else email


def get_author(cwl: Yaml) -> Optional[Author]:
    """Returns the author of the given entry, using either the schema.org or the
    Dublin Core / FOAF vocabulary. If there are several authors, only the first is used.

    Args:
        cwl (Yaml): An expanded CWL document

    Returns:
        Optional[Author]: The author, or None
    """
    vocabularies = [('s:author', 's:name', 's:email'),
                    ('dct:creator', 'foaf:name', 'foaf:mbox')]
    for (author_key, name_key, email_key) in vocabularies:
        authors = cwl.get(author_key)
        if isinstance(authors, List):
            authors = authors[0] if authors else None
        if isinstance(authors, Dict):
            name = authors.get(name_key)
            return Author(name=str(name) if name is not None else None,
                          email=strip_mailto(authors.get(email_key)))
        if author_key in cwl:
            # Only the first vocabulary present is used
            break
    logger.info('Author not found!')
    return None


def parse_workflow_content(file_path: str, content: str,
                           source_files: Union[SourceStore, Iterable[SourceFile]] = (),
                           config: Optional[PreprocessorConfig] = None) -> DescriptorMetadata:
    """Extracts the metadata of a workflow or tool. Metadata may be $import-ed, so the
    descriptor is preprocessed first. Empty content has no metadata. Malformed descriptors
    never raise; the problem is reported as a validation message instead.

    Args:
        file_path (str): The absolute path of the descriptor
        content (str): The contents of the descriptor
        source_files (Union[SourceStore, Iterable[SourceFile]]): The other files of the repository
        config (Optional[PreprocessorConfig]): The preprocessing limits. Defaults to the default limits.

    Raises:
        RecursionLimitError: If the descriptor might be recursive

    Returns:
        DescriptorMetadata: The metadata
    """
    if not content:
        return DescriptorMetadata()

    try:
        preprocessor = Preprocessor.from_config(source_files, config or PreprocessorConfig())
        cwl = preprocessor.preprocess(load_descriptor(content, file_path), file_path)
    except CwlParseError as ex:
        logger.warning(f'Could not extract metadata from {file_path}: {ex}')
        return DescriptorMetadata(validation_messages={file_path: CWL_METADATA_ERROR + ex.message})

    if not isinstance(cwl, Dict):
        message = CWL_METADATA_ERROR + f'expected a map, found {type(cwl).__name__}'
        logger.warning(message)
        return DescriptorMetadata(validation_messages={file_path: message})

    return DescriptorMetadata(description=get_description(cwl), author=get_author(cwl))


def get_file_formats(content: str, parameter_type: str) -> Set[str]:
    """Returns the format: of the inputs or outputs of a descriptor, i.e. http://edamontology.org/format_1929

    Args:
        content (str): The contents of the descriptor
        parameter_type (str): Either 'inputs' or 'outputs'

    Returns:
        Set[str]: The file formats, or the empty set if the descriptor cannot be parsed
    """
    try:
        cwl = load_descriptor(content)
    except CwlParseError as ex:
        logger.warning(f'Could not determine file formats: {ex}')
        return set()
    if not isinstance(cwl, Dict):
        return set()

    file_formats: Set[str] = set()
    for parameter in as_list(cwl.get(parameter_type), 'id', 'type'):
        if not isinstance(parameter, Dict):
            continue
        file_format = parameter.get('format')
        formats: List[Any] = file_format if isinstance(file_format, List) else [file_format]
        file_formats.update(fmt for fmt in formats if isinstance(fmt, str))
    return file_formats
