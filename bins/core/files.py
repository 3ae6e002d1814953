"""
Data models for uploads and downloads.

Uses dataclasses for simple, type-safe data structures.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from .range import RangeSelector


@dataclass
class UploadFile:
    """
    A single file to upload.

    Attributes:
        name: File name shown by the bin
        content: Text content
    """
    name: str
    content: str

    @property
    def size(self) -> int:
        """Returns content size in bytes (UTF-8)."""
        return len(self.content.encode('utf-8'))


@dataclass(frozen=True)
class PasteFile:
    """
    A downloaded file.

    Attributes:
        name: File name as reported by the bin
        content: Text content
    """
    name: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for JSON output."""
        return {'name': self.name, 'content': self.content}


@dataclass(frozen=True)
class Paste:
    """
    Result of a download.

    A paste is either single (one file) or multiple (ordered files). The
    shape follows what the bin reports, not what was requested.

    Example:
        >>> paste = Paste.single(PasteFile("a.txt", "hi"))
        >>> paste.is_multiple
        False
    """
    files: List[PasteFile]
    is_multiple: bool = False

    @classmethod
    def single(cls, file: PasteFile) -> 'Paste':
        return cls([file], is_multiple=False)

    @classmethod
    def multiple(cls, files: Sequence[PasteFile]) -> 'Paste':
        return cls(list(files), is_multiple=True)

    def to_json_data(self) -> Union[Dict[str, str], List[Dict[str, str]]]:
        """Single pastes serialize to an object, multiple pastes to a list."""
        if self.is_multiple:
            return [f.to_dict() for f in self.files]
        return self.files[0].to_dict()

    def to_text(self) -> str:
        """Render for plain stdout output."""
        if not self.is_multiple:
            return self.files[0].content
        return '\n'.join(f"==> {f.name} <==\n\n{f.content}" for f in self.files)


@dataclass(frozen=True)
class PasteUrl:
    """
    URL of a created paste.

    Attributes:
        url: Publicly reachable URL
        name: File name, when the paste holds several files
    """
    url: str
    name: Optional[str] = None

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class DownloadInfo:
    """
    Which files of a paste to download.

    At most one of ``range`` and ``names`` is set; neither means everything.
    """
    range: Optional[RangeSelector] = None
    names: Optional[List[str]] = None

    def __post_init__(self):
        if self.range is not None and self.names is not None:
            raise ValueError("DownloadInfo takes either a range or names, not both")

    @classmethod
    def empty(cls) -> 'DownloadInfo':
        return cls()

    @classmethod
    def from_range(cls, selector: RangeSelector) -> 'DownloadInfo':
        return cls(range=selector)

    @classmethod
    def from_names(cls, names: Sequence[str]) -> 'DownloadInfo':
        return cls(names=list(names))

    @property
    def is_empty(self) -> bool:
        return self.range is None and self.names is None
