"""
Writes downloaded pastes to a directory without overwriting anything.
"""
from pathlib import Path
from typing import List, Union

from .exceptions import IoError
from .files import Paste
from .logging import get_logger

logger = get_logger('bins.materializer')


def numbered_name(name: str, counter: int) -> str:
    """
    Insert ``_<counter>`` before the last extension.

    Example:
        >>> numbered_name('a.txt', 1)
        'a_1.txt'
        >>> numbered_name('README', 2)
        'README_2'
        >>> numbered_name('archive.tar.gz', 1)
        'archive.tar_1.gz'
    """
    parts = name.split('.')
    index = 0 if len(parts) == 1 else len(parts) - 2
    parts[index] = f"{parts[index]}_{counter}"
    return '.'.join(parts)


class FileMaterializer:
    """
    Writes each file of a paste into ``directory``.

    Existing files are never touched: a clashing name gets a counter
    (``a.txt``, ``a_1.txt``, ``a_2.txt``, ...).
    """

    def __init__(self, directory: Union[str, Path]):
        """
        Raises:
            IoError: If the directory is missing or not a directory
        """
        self.directory = Path(directory)
        if not self.directory.exists():
            raise IoError(f"{directory} does not exist")
        if not self.directory.is_dir():
            raise IoError(f"{directory} is not a directory")

    def destination(self, name: str) -> Path:
        """First free path for ``name`` inside the directory."""
        # only the last path component, so remote names cannot escape the directory
        name = Path(name).name
        if name in ('', '.', '..'):
            raise IoError("cannot write a file without a name", causes=[f"remote file name was {name!r}"])
        path = self.directory / name
        counter = 0
        while path.exists():
            counter += 1
            path = self.directory / numbered_name(name, counter)
        return path

    def write(self, paste: Paste) -> List[Path]:
        """
        Write every file of the paste.

        Returns:
            Paths written, in paste order

        Raises:
            IoError: On the first file that cannot be opened or written;
                the remaining files are not written
        """
        written = []
        for file in paste.files:
            path = self.destination(file.name)
            try:
                handle = open(path, 'x', encoding='utf-8', newline='')
            except OSError as e:
                raise IoError.wrap(e, f"could not open {path}") from e
            with handle:
                try:
                    handle.write(file.content)
                except OSError as e:
                    raise IoError.wrap(e, f"could not write to {path}") from e
            logger.debug(f"wrote {file.name} to {path}")
            written.append(path)
        return written
