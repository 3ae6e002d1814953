"""pastebin.com: single-file pastes through the developer API."""
from typing import FrozenSet, Optional

from ..core.exceptions import BackendError
from ..core.features import Feature
from ..core.files import UploadFile
from .base import SingleFileBin, url_segments

HOST = 'pastebin.com'
API_URL = f'https://{HOST}/api/api_post.php'


class Pastebin(SingleFileBin):
    """
    Every request needs the developer key from ``[pastebin] api_key``.
    Private pastes are created as unlisted.
    """

    @property
    def name(self) -> str:
        return 'pastebin'

    @property
    def raw_host(self) -> str:
        return HOST

    @property
    def html_host(self) -> str:
        return HOST

    @property
    def features(self) -> FrozenSet[Feature]:
        return frozenset({Feature.PUBLIC, Feature.PRIVATE, Feature.ANONYMOUS, Feature.SINGLE_NAMING})

    async def upload_file(self, file: UploadFile, prefer_html_url: bool) -> str:
        api_key = self._config.pastebin.api_key
        if not api_key:
            raise BackendError("no pastebin api_key is configured", causes=["set [pastebin] api_key in the config file"])
        body = await self._http.post_form(API_URL, {
            'api_dev_key': api_key,
            'api_option': 'paste',
            'api_paste_code': file.content,
            'api_paste_name': file.name,
            'api_paste_private': '1' if self.private else '0',
        })
        body = body.strip()
        paste_id = self.id_from_html_url(body)
        if paste_id is None:
            # errors come back as 200 with a "Bad API request, ..." body
            raise BackendError("pastebin rejected the paste", causes=[body[:200]])
        return self.format_html_url(paste_id) if prefer_html_url else self.format_raw_url(paste_id)

    def id_from_raw_url(self, url: str) -> Optional[str]:
        segments = url_segments(url, HOST)
        if segments is None or len(segments) != 2 or segments[0] != 'raw':
            return None
        return segments[1]

    def id_from_html_url(self, url: str) -> Optional[str]:
        segments = url_segments(url, HOST)
        if segments is None or len(segments) != 1:
            return None
        return segments[0]

    def format_raw_url(self, paste_id: str) -> str:
        return f'https://{HOST}/raw/{paste_id}'

    def format_html_url(self, paste_id: str) -> str:
        return f'https://{HOST}/{paste_id}'
