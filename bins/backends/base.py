"""
Base classes for bins (paste hosting backends).

Every bin advertises a name, two hostnames used to route download URLs,
and a feature set, and implements upload/download plus URL conversions.
Network operations are coroutines; URL parsing and formatting are pure.
"""
from abc import ABC, abstractmethod
from typing import FrozenSet, List, Optional, Sequence
from urllib.parse import urlparse

from ..core.config import Config
from ..core.exceptions import UsageError
from ..core.features import Feature
from ..core.files import DownloadInfo, Paste, PasteFile, PasteUrl, UploadFile
from ..core.options import CommandLineOptions
from .http import HttpClient


def url_segments(url: str, host: str) -> Optional[List[str]]:
    """
    Split a URL's path into non-empty segments.

    Returns:
        Segments, or ``None`` when the URL does not belong to ``host``
    """
    parsed = urlparse(url)
    if parsed.hostname is None or parsed.hostname != host.lower():
        return None
    return [s for s in parsed.path.split('/') if s]


def select_files(files: Sequence[PasteFile], info: DownloadInfo) -> List[PasteFile]:
    """
    Narrow a paste's files down to what was asked for.

    Range selections come back in ascending index order; name selections
    keep the paste's order.

    Raises:
        UsageError: If an index is out of bounds or a name is not in the paste
    """
    if info.range is not None:
        return [files[i] for i in info.range.resolve(len(files))]
    if info.names is not None:
        known = {f.name for f in files}
        missing = [n for n in info.names if n not in known]
        if missing:
            raise UsageError(
                "the paste does not contain the requested files",
                causes=[f"no file named {name}" for name in missing]
            )
        wanted = set(info.names)
        return [f for f in files if f.name in wanted]
    return list(files)


class Bin(ABC):
    """
    A paste hosting service.

    Bins are built once at startup and shared read-only. They hold the
    shared HTTP client plus references to the config and command-line
    options for credentials and visibility choices.
    """

    def __init__(
        self,
        http: HttpClient,
        config: Optional[Config] = None,
        options: Optional[CommandLineOptions] = None
    ):
        """
        Args:
            http: Shared HTTP client
            config: Loaded configuration
            options: Command-line options
        """
        self._http = http
        self._config = config or Config.default()
        self._options = options or CommandLineOptions()

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique registry key."""
        ...

    @property
    @abstractmethod
    def raw_host(self) -> str:
        """Host serving plain content."""
        ...

    @property
    @abstractmethod
    def html_host(self) -> str:
        """Host serving human-facing pages."""
        ...

    @property
    @abstractmethod
    def features(self) -> FrozenSet[Feature]:
        ...

    @property
    def private(self) -> bool:
        """Whether to create private/unlisted pastes (CLI, then config default)."""
        if self._options.private is not None:
            return self._options.private
        return bool(self._config.defaults.private)

    @property
    def authed(self) -> bool:
        """Whether to paste with configured credentials (CLI, then config default)."""
        if self._options.authed is not None:
            return self._options.authed
        return bool(self._config.defaults.authed)

    @abstractmethod
    async def upload(self, files: Sequence[UploadFile], prefer_html_url: bool) -> List[PasteUrl]:
        """
        Create a paste.

        Args:
            files: Files to upload
            prefer_html_url: Return human-facing URLs when both shapes exist

        Raises:
            BackendError: If the service rejects the paste or is unreachable
        """
        ...

    @abstractmethod
    async def download(self, paste_id: str, info: DownloadInfo) -> Paste:
        """Fetch a paste by ID, narrowed by ``info`` for multi-file pastes."""
        ...

    @abstractmethod
    def id_from_raw_url(self, url: str) -> Optional[str]:
        ...

    @abstractmethod
    def id_from_html_url(self, url: str) -> Optional[str]:
        ...

    def format_raw_url(self, paste_id: str) -> Optional[str]:
        """Raw URL for an ID, or ``None`` when it needs ``create_raw_url``."""
        return None

    @abstractmethod
    async def create_raw_url(self, paste_id: str) -> List[PasteUrl]:
        ...

    @abstractmethod
    async def create_html_url(self, paste_id: str) -> List[PasteUrl]:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class SingleFileBin(Bin):
    """
    Bin that holds one file per paste.

    Several upload files become several pastes, one URL each, tagged with
    the file name. Downloads ignore file selections.
    """

    @abstractmethod
    async def upload_file(self, file: UploadFile, prefer_html_url: bool) -> str:
        """Upload one file and return its URL."""
        ...

    @abstractmethod
    def format_html_url(self, paste_id: str) -> str:
        ...

    @abstractmethod
    def format_raw_url(self, paste_id: str) -> str:
        ...

    async def upload(self, files: Sequence[UploadFile], prefer_html_url: bool) -> List[PasteUrl]:
        urls = []
        for file in files:
            url = await self.upload_file(file, prefer_html_url)
            urls.append(PasteUrl(url, file.name if len(files) > 1 else None))
        return urls

    async def download(self, paste_id: str, info: DownloadInfo) -> Paste:
        content = await self._http.get_text(self.format_raw_url(paste_id))
        return Paste.single(PasteFile(paste_id, content))

    async def create_raw_url(self, paste_id: str) -> List[PasteUrl]:
        return [PasteUrl(self.format_raw_url(paste_id))]

    async def create_html_url(self, paste_id: str) -> List[PasteUrl]:
        return [PasteUrl(self.format_html_url(paste_id))]


class MultiFileBin(Bin):
    """
    Bin whose pastes can hold several named files.

    Subclasses report every file of a paste; selection by range or name
    happens here once the file count is known.
    """

    @abstractmethod
    async def fetch_files(self, paste_id: str) -> List[PasteFile]:
        """Fetch every file of a paste, in the service's order."""
        ...

    async def download(self, paste_id: str, info: DownloadInfo) -> Paste:
        files = await self.fetch_files(paste_id)
        selected = select_files(files, info)
        if len(files) == 1:
            return Paste.single(selected[0])
        return Paste.multiple(selected)
