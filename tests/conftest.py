"""Pytest fixtures for bins tests."""
import io
import logging
from typing import FrozenSet, List, Optional, Sequence
from unittest.mock import AsyncMock

import pytest

from bins.backends import Bin, HttpClient, select_files
from bins.backends.base import url_segments
from bins.core.config import Config, SafetyConfig
from bins.core.features import Feature
from bins.core.files import Paste, PasteFile, PasteUrl, UploadFile


class FakeBin(Bin):
    """
    In-memory bin.

    Page URLs look like ``https://<html_host>/<id>``, raw URLs like
    ``https://<raw_host>/<id>``. Uploads are recorded; downloads are
    served from ``pastes``.
    """

    def __init__(
        self,
        name: str = 'fake',
        raw_host: str = 'raw.fake.test',
        html_host: str = 'fake.test',
        features: Sequence[Feature] = (Feature.PUBLIC, Feature.ANONYMOUS),
        pastes: Optional[dict] = None,
        formats_raw: bool = True,
        http=None,
    ):
        super().__init__(http or AsyncMock(spec=HttpClient))
        self._name = name
        self._raw_host = raw_host
        self._html_host = html_host
        self._features = frozenset(features)
        self.pastes = pastes or {}
        self.formats_raw = formats_raw
        self.uploads: List[List[UploadFile]] = []
        self.downloads: List[tuple] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def raw_host(self) -> str:
        return self._raw_host

    @property
    def html_host(self) -> str:
        return self._html_host

    @property
    def features(self) -> FrozenSet[Feature]:
        return self._features

    async def upload(self, files, prefer_html_url):
        self.uploads.append(list(files))
        paste_id = f'p{len(self.uploads)}'
        host = self.html_host if prefer_html_url else self.raw_host
        return [PasteUrl(f'https://{host}/{paste_id}')]

    async def download(self, paste_id, info):
        self.downloads.append((paste_id, info))
        files = self.pastes[paste_id]
        selected = select_files(files, info)
        if len(files) == 1:
            return Paste.single(selected[0])
        return Paste.multiple(selected)

    def _id(self, url, host):
        segments = url_segments(url, host)
        if not segments or len(segments) != 1:
            return None
        return segments[0]

    def id_from_raw_url(self, url):
        return self._id(url, self.raw_host)

    def id_from_html_url(self, url):
        return self._id(url, self.html_host)

    def format_raw_url(self, paste_id):
        if not self.formats_raw:
            return None
        return f'https://{self.raw_host}/{paste_id}'

    async def create_raw_url(self, paste_id):
        files = self.pastes.get(paste_id)
        if not files:
            return [PasteUrl(f'https://{self.raw_host}/{paste_id}')]
        return [PasteUrl(f'https://{self.raw_host}/{paste_id}-{i}', f.name) for i, f in enumerate(files)]

    async def create_html_url(self, paste_id):
        return [PasteUrl(f'https://{self.html_host}/{paste_id}')]


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging() so caplog sees records in every test."""
    yield
    logger = logging.getLogger('bins')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def make_bin():
    """Factory for FakeBin instances."""
    return FakeBin


@pytest.fixture
def http():
    """HTTP client double; every coroutine method is an AsyncMock."""
    return AsyncMock(spec=HttpClient)


@pytest.fixture
def three_files():
    """Files of a three-file paste."""
    return [
        PasteFile('one.txt', 'first'),
        PasteFile('two.txt', 'second'),
        PasteFile('three.txt', 'third'),
    ]


@pytest.fixture
def fake_bin(three_files):
    """Fake bin holding a single-file paste 'solo' and a three-file paste 'trio'."""
    return FakeBin(pastes={
        'solo': [PasteFile('solo', 'just one')],
        'trio': three_files,
    })


@pytest.fixture
def strict_config():
    """Config that warns and cancels on unsupported features."""
    return Config(safety=SafetyConfig(warn_on_unsupported=True, cancel_on_unsupported=True))


@pytest.fixture
def empty_stdin():
    return io.StringIO('')
