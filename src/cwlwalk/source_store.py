from typing import Dict, Iterable, Iterator, Optional

from .cwlwalk_types import SourceFile
from .utils import normalize_path


class SourceStore():
    """An immutable snapshot of the files of a repository at one reference,
    keyed by normalized absolute path. The engine only ever reads from it,
    so one instance can be shared between concurrent invocations.
    """

    def __init__(self, source_files: Iterable[SourceFile] = ()) -> None:
        self._files: Dict[str, str] = {}
        for source_file in source_files:
            self._files[normalize_path(source_file.absolute_path)] = source_file.content

    def get(self, path: Optional[str]) -> Optional[str]:
        """Returns the content of the file at path, or None if there is no such file."""
        if path is None:
            return None
        return self._files.get(normalize_path(path))

    def get_file(self, path: str) -> Optional[SourceFile]:
        content = self.get(path)
        if content is None:
            return None
        return SourceFile(normalize_path(path), content)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[SourceFile]:
        return (SourceFile(path, content) for path, content in self._files.items())
