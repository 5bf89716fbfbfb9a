"""
Read-only template sources.

A template source is a directory tree of text files. Paths are always relative
to the root of the source and use '/' as separator, whatever the platform.
"""

from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Mapping, Union

from ztp.errors import FilesystemError


def clean_dir(directory: str) -> str:
    """
    Validate and normalize a relative directory name.

    Args:
        directory: Directory name relative to the root of a source

    Returns:
        The normalized name, without leading or trailing separators

    Raises:
        FilesystemError: If the name is empty, absolute or escapes the root
    """
    if not directory or directory.startswith("/") or "\\" in directory:
        raise FilesystemError(f"Invalid directory name: '{directory}'", path=directory)
    parts = [part for part in directory.split("/") if part not in ("", ".")]
    if not parts or ".." in parts:
        raise FilesystemError(f"Invalid directory name: '{directory}'", path=directory)
    return "/".join(parts)


class SourceFS(ABC):
    """
    Abstract read-only directory tree that supplies template files.
    """

    @abstractmethod
    def walk(self) -> Iterator[str]:
        """
        Yield the relative path of every regular file in the tree.

        Entries of a directory are visited sorted by name, and directories are
        descended into at their sorted position, so the order is stable for a
        given snapshot of the tree.

        Raises:
            FilesystemError: If the tree can't be traversed
        """
        pass

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """
        Read the content of a file.

        Raises:
            FilesystemError: If the file can't be read
        """
        pass

    @abstractmethod
    def sub(self, directory: str) -> "SourceFS":
        """
        Return a source rooted at the given subdirectory.

        Raises:
            FilesystemError: If the subdirectory is invalid or doesn't exist
        """
        pass


class DirectoryFS(SourceFS):
    """
    Template source backed by a directory of the local filesystem.

    Symlinks to files are read through; symlinked directories are not
    descended into.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DirectoryFS({str(self.root)!r})"

    def walk(self) -> Iterator[str]:
        if not self.root.is_dir():
            raise FilesystemError(f"Template directory not found: {self.root}", path=str(self.root))
        yield from self._walk(self.root, PurePosixPath())

    def _walk(self, directory: Path, prefix: PurePosixPath) -> Iterator[str]:
        try:
            entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
        except OSError as e:
            raise FilesystemError(
                f"Failed to list directory {directory}: {e}", path=str(prefix)
            ) from e

        for entry in entries:
            relative = prefix / entry.name
            try:
                if entry.is_dir() and not entry.is_symlink():
                    yield from self._walk(entry, relative)
                elif entry.is_file():
                    yield str(relative)
            except OSError as e:
                raise FilesystemError(
                    f"Failed to inspect {entry}: {e}", path=str(relative)
                ) from e

    def read_bytes(self, path: str) -> bytes:
        try:
            return (self.root / path).read_bytes()
        except OSError as e:
            raise FilesystemError(f"Failed to read template file {path}: {e}", path=path) from e

    def sub(self, directory: str) -> "DirectoryFS":
        directory = clean_dir(directory)
        target = self.root / directory
        if not target.is_dir():
            raise FilesystemError(
                f"Template directory not found: {target}", path=directory
            )
        return DirectoryFS(target)


class MemoryFS(SourceFS):
    """
    Template source backed by an in-memory mapping of paths to contents.

    Directories are implied by the file paths, for example the key
    'spoke/cluster.yaml' implies a 'spoke' directory.

    Example:
        source = MemoryFS({
            "envelope.json": '{"content": {{ execute("body.yaml", data) | base64 | json }}}',
            "body.yaml": "kind: ConfigMap",
        })
    """

    def __init__(self, files: Mapping[str, Union[bytes, str]]):
        self.files: Dict[str, bytes] = {}
        for path, content in files.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            self.files[clean_dir(path)] = bytes(content)

    def __repr__(self) -> str:
        return f"MemoryFS({sorted(self.files)!r})"

    def walk(self) -> Iterator[str]:
        # Sorting the split paths gives the same order as a directory walk.
        paths: List[str] = sorted(self.files, key=lambda path: path.split("/"))
        yield from paths

    def read_bytes(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FilesystemError(f"Template file not found: {path}", path=path) from None

    def sub(self, directory: str) -> "MemoryFS":
        directory = clean_dir(directory)
        prefix = directory + "/"
        files = {
            path[len(prefix):]: content
            for path, content in self.files.items()
            if path.startswith(prefix)
        }
        if not files:
            raise FilesystemError(f"Template directory not found: {directory}", path=directory)
        return MemoryFS(files)
