"""
Dispatcher for one bins invocation.

Decides between listing bins, uploading and downloading, picks the bin
(by name for uploads, by URL host for downloads), runs the safety checks
and formats whatever should be printed.
"""
import json
import sys
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, TextIO, Tuple, Union
from urllib.parse import urlparse

from ..backends import Bin, HttpClient, create_bins, registry
from .config import Config
from .exceptions import (
    DisallowedFile,
    IdExtractionError,
    IoError,
    SerializationError,
    SizeLimitExceeded,
    UnknownBackend,
    UnknownHost,
    UsageError,
)
from .features import FeatureNegotiator
from .files import DownloadInfo, PasteUrl, UploadFile
from .logging import get_logger
from .materializer import FileMaterializer
from .options import CommandLineOptions, UrlOutputMode

logger = get_logger('bins.dispatcher')


def is_url(text: str) -> bool:
    """True for absolute URLs such as ``https://host/path``."""
    parsed = urlparse(text)
    return bool(parsed.scheme) and bool(parsed.netloc)


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class Bins:
    """
    Runs one invocation.

    Config and options are read-only; bins are built once around the
    shared HTTP client unless supplied by the caller.

    Example:
        >>> options = CommandLineOptions(bin='sprunge', message='hello')
        >>> output = asyncio.run(Bins(Config.default(), options).main())
    """

    def __init__(
        self,
        config: Config,
        options: CommandLineOptions,
        bins: Optional[Union[Iterable[Bin], Dict[str, Bin]]] = None,
        http: Optional[HttpClient] = None,
        stdin: Optional[TextIO] = None
    ):
        """
        Args:
            config: Loaded configuration
            options: Command-line options
            bins: Bins to dispatch to (defaults to every known bin)
            http: Shared HTTP client, closed when ``main`` returns
            stdin: Stream read when there is nothing else to upload

        Raises:
            ConfigError: If the configured size limit is malformed
        """
        self.config = config
        self.options = options
        self._http = http or HttpClient(timeout=config.general.timeout)
        if bins is None:
            self.bins = create_bins(self._http, config, options)
        elif isinstance(bins, dict):
            self.bins = dict(sorted(bins.items()))
        else:
            self.bins = registry(bins)
        self._stdin = stdin
        self.file_size_limit = config.file_size_limit

    async def main(self) -> str:
        """
        Run the invocation.

        Returns:
            Text to print (may be empty)
        """
        try:
            return await self._run()
        finally:
            await self._http.close()

    async def _run(self) -> str:
        if self.options.list_bins:
            return self.list_bins()
        inputs = list(self.options.inputs)
        if inputs and is_url(inputs[0]):
            return await self.download(inputs[0], inputs[1:] or None)
        if self.options.range is not None:
            raise UsageError("cannot upload with --range")
        return await self.upload(inputs or None)

    # Listing

    def list_bins(self) -> str:
        names = list(self.bins)
        if self.options.json:
            return self.to_json(names, "could not serialize list of bins")
        return '\n'.join(names)

    def to_json(self, data: Any, message: str = "could not serialize output") -> str:
        try:
            return json.dumps(data)
        except (TypeError, ValueError) as e:
            raise SerializationError.wrap(e, message) from e

    # Upload

    def bin_name(self) -> str:
        name = self.options.bin or self.config.defaults.bin
        if name is None or not name.strip():
            raise UsageError("no bin was specified", causes=["use --bin or set defaults.bin in the config file"])
        return name.strip()

    def select_bin(self) -> Bin:
        name = self.bin_name()
        if name not in self.bins:
            raise UnknownBackend(f'there is no bin called "{name}"', name=name)
        return self.bins[name]

    def check_patterns(self, name: str) -> None:
        for pattern in self.config.safety.disallowed_file_patterns:
            if not fnmatch(name, pattern):
                continue
            if self.options.force:
                logger.warning(f"forcing upload of {name}, which matches the disallowed pattern {pattern}")
                return
            raise DisallowedFile(f"{name} matches the disallowed pattern {pattern}")

    def check_limit(self, name: str, size: int) -> None:
        limit = self.file_size_limit
        if limit is None or size <= limit:
            return
        if self.options.force:
            logger.warning(f"{name} is {plural(size, 'byte')}, which is over the {plural(limit, 'byte')} limit")
            return
        raise SizeLimitExceeded(
            f"{name} is {plural(size, 'byte')}, which is over the size limit of {plural(limit, 'byte')}",
            size=size,
            limit=limit
        )

    def read_files(self, paths: Sequence[str]) -> List[UploadFile]:
        """
        Read upload files from disk.

        Names, patterns and sizes are checked for every file before any
        content is read.
        """
        checked: List[Tuple[str, Path]] = []
        for raw in paths:
            path = Path(raw)
            name = path.name
            if not name:
                raise UsageError(f"{raw} does not have a file name")
            self.check_patterns(name)
            try:
                size = path.stat().st_size
            except OSError as e:
                raise IoError.wrap(e, f"could not open {raw}") from e
            self.check_limit(name, size)
            checked.append((name, path))

        files = []
        for name, path in checked:
            try:
                content = path.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                raise IoError.wrap(e, f"could not read {path}") from e
            files.append(UploadFile(name, content))
        return files

    def read_stdin(self) -> UploadFile:
        stream = self._stdin or sys.stdin
        try:
            content = stream.read()
        except (OSError, UnicodeDecodeError) as e:
            raise IoError.wrap(e, "could not read standard input") from e
        return UploadFile('stdin', content)

    def upload_files(self, inputs: Optional[Sequence[str]]) -> List[UploadFile]:
        """Files from paths, else the message, else stdin; then the name override."""
        if inputs:
            files = self.read_files(inputs)
        elif self.options.message is not None:
            files = [UploadFile('message', self.options.message)]
        else:
            files = [self.read_stdin()]

        if self.options.name is not None:
            if len(files) != 1:
                raise UsageError("cannot use --name with multiple upload files")
            files[0].name = self.options.name
        return files

    async def raw_urls(self, paste_bin: Bin, urls: Sequence[PasteUrl]) -> List[str]:
        """Turn page URLs returned by an upload into raw content URLs."""
        raw = []
        for u in urls:
            if paste_bin.id_from_raw_url(u.url) is not None:
                raw.append(u.url)
                continue
            paste_id = paste_bin.id_from_html_url(u.url)
            if paste_id is None:
                raise IdExtractionError("could not parse ID from URL", causes=[u.url])
            formatted = paste_bin.format_raw_url(paste_id)
            if formatted is not None:
                raw.append(formatted)
            else:
                raw.extend(x.url for x in await paste_bin.create_raw_url(paste_id))
        return raw

    async def upload(self, inputs: Optional[Sequence[str]]) -> str:
        paste_bin = self.select_bin()
        FeatureNegotiator(self.config.safety, self.options).check(paste_bin.name, paste_bin.features)

        files = self.upload_files(inputs)
        logger.debug(f"uploading {plural(len(files), 'file')} to {paste_bin.name}")
        urls = await paste_bin.upload(files, self.options.url_output is None)
        if self.options.url_output is UrlOutputMode.RAW:
            return '\n'.join(await self.raw_urls(paste_bin, urls))
        return '\n'.join(u.url for u in urls)

    # Download

    def bin_for_url(self, url: str) -> Tuple[Bin, str]:
        """
        Find the bin owning a URL and extract the paste ID.

        Raw hosts win over HTML hosts. A bin serving both shapes from one
        host gets its HTML parser tried when the raw one fails.

        Raises:
            UnknownHost: If no bin uses the URL's host
            IdExtractionError: If the bin cannot parse an ID from the URL
        """
        host = urlparse(url).hostname
        if not host:
            raise UnknownHost("url was missing a host", causes=[url])

        paste_bin = next((b for b in self.bins.values() if b.raw_host == host), None)
        if paste_bin is not None:
            paste_id = paste_bin.id_from_raw_url(url)
            if paste_id is None and paste_bin.html_host == host:
                paste_id = paste_bin.id_from_html_url(url)
        else:
            paste_bin = next((b for b in self.bins.values() if b.html_host == host), None)
            if paste_bin is None:
                raise UnknownHost(f"no bin uses the hostname {host}", host=host)
            paste_id = paste_bin.id_from_html_url(url)

        if paste_id is None:
            raise IdExtractionError("could not parse ID from URL", causes=[url])
        return paste_bin, paste_id

    def download_info(self, names: Optional[Sequence[str]]) -> DownloadInfo:
        if names and self.options.range is not None:
            raise UsageError("cannot specify file names with --range")
        if self.options.range is not None:
            return DownloadInfo.from_range(self.options.range)
        if names:
            return DownloadInfo.from_names(names)
        return DownloadInfo.empty()

    async def download(self, url: str, names: Optional[Sequence[str]] = None) -> str:
        info = self.download_info(names)
        paste_bin, paste_id = self.bin_for_url(url)
        logger.debug(f"{url} is {paste_id} on {paste_bin.name}")

        if self.options.url_output is not None:
            if self.options.url_output is UrlOutputMode.HTML:
                urls = await paste_bin.create_html_url(paste_id)
            else:
                urls = await paste_bin.create_raw_url(paste_id)
            return '\n'.join(u.url for u in urls)

        if self.options.list_all:
            urls = await paste_bin.create_raw_url(paste_id)
            return '\n'.join(u.name or '<unknown>' for u in urls)

        paste = await paste_bin.download(paste_id, info)

        if self.options.output is not None:
            written = FileMaterializer(self.options.output).write(paste)
            logger.debug(f"wrote {plural(len(written), 'file')} to {self.options.output}")
            return ''
        if self.options.json:
            return self.to_json(paste.to_json_data(), "could not serialize paste")
        return paste.to_text()
