import logging
from typing import Any, Optional, Type

import yaml

from .cwlwalk_types import DocumentNode
from .exceptions import CWL_PARSE_ERROR, CwlParseError

logger = logging.getLogger('cwlwalk.yaml')

MAX_NESTING = 256

# NOTE: Subclass; do not add constructors or resolvers to yaml.SafeLoader itself,
# since it is shared with every other caller of yaml.safe_load.


class CwlLoader(yaml.SafeLoader):

    nesting = 0

    def compose_node(self, parent: Optional[yaml.Node], index: Any) -> Optional[yaml.Node]:
        # Aliases can expand a small file into an exponentially large or cyclic tree
        if self.check_event(yaml.AliasEvent):
            event = self.peek_event()
            raise yaml.composer.ComposerError(None, None, f'found alias *{event.anchor}, aliases are not allowed',
                                              event.start_mark)
        if self.nesting >= MAX_NESTING:
            raise yaml.composer.ComposerError(None, None, f'nesting exceeds {MAX_NESTING} levels',
                                              self.peek_event().start_mark)
        self.nesting += 1
        try:
            return super().compose_node(parent, index)
        finally:
            self.nesting -= 1


# Keep dates and timestamps (i.e. s:dateCreated: 2020-01-01) as plain strings,
# so that the expanded document stays json serializable.
CwlLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != 'tag:yaml.org,2002:timestamp']
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def cwl_loader() -> Type[yaml.SafeLoader]:
    return CwlLoader


def load_descriptor(content: str, path: Optional[str] = None) -> DocumentNode:
    """Parses the text of a yaml (or json) descriptor into a python tree.

    Arbitrary type tags (i.e. !!python/object) are rejected by the safe loader.

    Args:
        content (str): The file contents
        path (Optional[str]): The path of the file, only used for error reporting.

    Raises:
        CwlParseError: If the content is not valid yaml / json, uses aliases, or is nested too deeply.

    Returns:
        DocumentNode: The parsed dict / list / scalar tree
    """
    try:
        return yaml.load(content, Loader=cwl_loader())
    except yaml.YAMLError as ex:
        message = CWL_PARSE_ERROR + str(ex)
        logger.error(message)
        raise CwlParseError(message, path) from ex
    except RecursionError as ex:
        message = CWL_PARSE_ERROR + 'the document is nested too deeply'
        logger.error(message)
        raise CwlParseError(message, path) from ex
