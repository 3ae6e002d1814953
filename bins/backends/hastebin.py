"""hastebin: anonymous, public, single-file pastes on a configurable server."""
from typing import FrozenSet, Optional
from urllib.parse import urlparse

from ..core.exceptions import BackendError
from ..core.features import Feature
from ..core.files import UploadFile
from .base import SingleFileBin, url_segments


class Hastebin(SingleFileBin):
    """
    Raw bodies are posted to ``<server>/documents``, which answers with a
    key. Pages live at ``<server>/<key>``, plain text at ``<server>/raw/<key>``.
    """

    @property
    def name(self) -> str:
        return 'hastebin'

    @property
    def server(self) -> str:
        return self._config.hastebin.server.rstrip('/')

    @property
    def raw_host(self) -> str:
        return urlparse(self.server).hostname or ''

    @property
    def html_host(self) -> str:
        return self.raw_host

    @property
    def features(self) -> FrozenSet[Feature]:
        return frozenset({Feature.PUBLIC, Feature.ANONYMOUS})

    async def upload_file(self, file: UploadFile, prefer_html_url: bool) -> str:
        response = await self._http.post_data(f'{self.server}/documents', file.content.encode('utf-8'))
        key = response.get('key') if isinstance(response, dict) else None
        if not key:
            raise BackendError("hastebin did not return a document key", causes=[str(response)[:200]])
        return self.format_html_url(key) if prefer_html_url else self.format_raw_url(key)

    def id_from_raw_url(self, url: str) -> Optional[str]:
        segments = url_segments(url, self.raw_host)
        if segments is None or len(segments) != 2 or segments[0] != 'raw':
            return None
        return segments[1].split('.')[0] or None

    def id_from_html_url(self, url: str) -> Optional[str]:
        segments = url_segments(url, self.html_host)
        if segments is None or len(segments) != 1:
            return None
        # pages may carry a highlighting extension, e.g. /abcdef.py
        return segments[0].split('.')[0] or None

    def format_raw_url(self, paste_id: str) -> str:
        return f'{self.server}/raw/{paste_id}'

    def format_html_url(self, paste_id: str) -> str:
        return f'{self.server}/{paste_id}'
