import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from .cwlwalk_types import SourceFile
from .preprocessor import PreprocessorConfig
from .source_store import SourceStore

logger = logging.getLogger('cwlwalk.io')

SKIP_DIRS = ['.git', '__pycache__', 'node_modules']


def get_config(config_file: Optional[Path]) -> PreprocessorConfig:
    """Reads the preprocessing limits from a (JSON) config file, i.e.\n
    {"max_depth": 10, "max_char_count": 4194304, "max_file_count": 1000}\n
    Missing keys keep their default values.

    Args:
        config_file (Optional[Path]): The config file. If None or if it does not exist, the defaults are used.

    Raises:
        pydantic.ValidationError: If any of the limits is not a positive integer

    Returns:
        PreprocessorConfig: The limits
    """
    if config_file is None or not config_file.exists():
        return PreprocessorConfig()
    with open(config_file, mode='r', encoding='utf-8') as f:
        config_json = json.load(f)
    logger.info(f'Using config file {config_file}')
    return PreprocessorConfig(**config_json)


def repository_path(repo_dir: Path, path: Path) -> str:
    """Converts a filesystem path into the absolute path of the file within its repository, i.e. /workflows/main.cwl"""
    return '/' + path.resolve().relative_to(repo_dir.resolve()).as_posix()


def read_source_files(repo_dir: Path) -> List[SourceFile]:
    """Reads every text file in a repository checkout

    Args:
        repo_dir (Path): The root directory of the repository

    Returns:
        List[SourceFile]: The files, with paths relative to (and rooted at) repo_dir
    """
    source_files = []
    for path in sorted(repo_dir.rglob('*')):
        if not path.is_file() or any(part in SKIP_DIRS for part in path.relative_to(repo_dir).parts):
            continue
        try:
            content = path.read_text(encoding='utf-8')
        except UnicodeDecodeError:
            logger.debug(f'Skipping binary file {path}')
            continue
        source_files.append(SourceFile(repository_path(repo_dir, path), content))
    return source_files


def source_store_from_directory(repo_dir: Path) -> SourceStore:
    return SourceStore(read_source_files(repo_dir))


def read_root(root_file: Path, repo_dir: Optional[Path] = None) -> Tuple[str, str]:
    """Reads the root descriptor

    Args:
        root_file (Path): The root descriptor
        repo_dir (Optional[Path]): The root directory of the repository. Defaults to the parent of root_file.

    Returns:
        Tuple[str, str]: The absolute path of root_file within the repository, and its contents
    """
    repo_dir = root_file.parent if repo_dir is None else repo_dir
    content = root_file.read_text(encoding='utf-8')
    return (repository_path(repo_dir, root_file), content)
