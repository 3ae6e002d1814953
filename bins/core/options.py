"""
Command-line options.

Built once by the CLI and shared read-only by the dispatcher and every bin.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .range import RangeSelector


class UrlOutputMode(str, Enum):
    """URL shape explicitly requested on the command line."""

    RAW = 'raw'
    HTML = 'html'


@dataclass(frozen=True)
class CommandLineOptions:
    """
    What the user asked for on the command line.

    Tri-state flags (``private``, ``authed``) are ``None`` when the user did
    not say anything, so config defaults can apply.

    Attributes:
        bin: Bin name given with ``--bin``
        inputs: Positional inputs (file paths, or a URL plus file names)
        message: Literal message to upload
        list_bins: List available bins instead of uploading
        private: ``True`` for --private, ``False`` for --public
        authed: ``True`` for --auth, ``False`` for --anon
        json: Emit JSON instead of plain text
        force: Override safety checks
        list_all: List file names of a paste instead of downloading
        range: Parsed range selector for downloads
        name: Name override for a single uploaded file
        output: Directory to download files into
        url_output: Explicit URL shape to print
    """
    bin: Optional[str] = None
    inputs: Tuple[str, ...] = field(default_factory=tuple)
    message: Optional[str] = None
    list_bins: bool = False
    private: Optional[bool] = None
    authed: Optional[bool] = None
    json: bool = False
    force: bool = False
    list_all: bool = False
    range: Optional[RangeSelector] = None
    name: Optional[str] = None
    output: Optional[str] = None
    url_output: Optional[UrlOutputMode] = None
