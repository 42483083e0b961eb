import posixpath
import re
from typing import Any, Collection, Dict, List, Optional

from .cwlwalk_types import Yaml

IMPORT_KEYS = ['$import', 'import']
INCLUDE_KEYS = ['$include', 'include']
MIXIN_KEYS = ['$mixin', 'mixin']

HTTP_URL_PATTERN = re.compile(r'^https?://[^\s/$.?#][^\s]*$', re.IGNORECASE)


def normalize_path(path: str) -> str:
    """Returns the normalized, absolute (i.e. leading slash) form of a posix path

    Args:
        path (str): A relative or absolute path

    Returns:
        str: The path with a single leading slash and without any . or .. segments
    """
    return posixpath.normpath('/' + path.lstrip('/'))


def convert_relative_path_to_absolute_path(parent_path: str, child_path: str) -> str:
    """Resolves a path referenced from within a file against the directory of that file.

    Args:
        parent_path (str): The absolute path of the referencing file
        child_path (str): The (possibly relative) path found in the referencing file

    Returns:
        str: The normalized absolute path of the referenced file
    """
    if child_path.startswith('/'):
        return normalize_path(child_path)
    parent_dir = posixpath.dirname(parent_path) or '/'
    return normalize_path(posixpath.join(parent_dir, child_path))


def strip_leading_slashes(value: str) -> str:
    return value.lstrip('/')


def is_http_url(value: str) -> bool:
    return HTTP_URL_PATTERN.match(value) is not None


def find_key(keys: Collection[str], mapping: Yaml) -> Optional[str]:
    """Finds the first key of mapping which (case insensitively) matches one of keys

    Args:
        keys (Collection[str]): The lowercase candidate keys, i.e. ['$import', 'import']
        mapping (Yaml): The map to search

    Returns:
        Optional[str]: The key as it appears in mapping, or None
    """
    for map_key in mapping:
        if isinstance(map_key, str) and map_key.lower() in keys:
            return map_key
    return None


def find_string(keys: Collection[str], mapping: Yaml) -> Optional[str]:
    """Like find_key, but returns the value, and only if it is a string."""
    key = find_key(keys, mapping)
    if key is None:
        return None
    value = mapping[key]
    return value if isinstance(value, str) else None


def remove_key(keys: Collection[str], mapping: Yaml) -> None:
    key = find_key(keys, mapping)
    if key is not None:
        del mapping[key]


def first_non_empty(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def as_list(obj: Any, key_name: str = 'id', value_key: str = 'value') -> List[Any]:
    """Normalizes the map form of a CWL array (i.e. steps:, inputs:, requirements:)
    into the list form. The map key is stored under key_name, and map values which
    are not dicts (i.e. the shorthand in: {x: step/out}) are stored under value_key.
    Lists are returned unchanged.

    Args:
        obj (Any): Either a list, a dict, or something else (i.e. None)
        key_name (str): The field which receives the map key. Defaults to 'id'.
        value_key (str): The field which receives a non-dict map value. Defaults to 'value'.

    Returns:
        List[Any]: The list form, or [] if obj is neither a list nor a dict.
    """
    if isinstance(obj, list):
        return obj
    if isinstance(obj, Dict):
        lst = []
        for key, val in obj.items():
            if isinstance(val, Dict):
                lst.append({**val, key_name: key})
            else:
                lst.append({key_name: key, value_key: val})
        return lst
    return []
