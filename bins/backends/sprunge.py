"""sprunge.us: anonymous, public, single-file pastes."""
from typing import FrozenSet, Optional

from ..core.exceptions import BackendError
from ..core.features import Feature
from ..core.files import UploadFile
from .base import SingleFileBin, url_segments

HOST = 'sprunge.us'


class Sprunge(SingleFileBin):
    """Pastes are created by posting a ``sprunge`` form field."""

    @property
    def name(self) -> str:
        return 'sprunge'

    @property
    def raw_host(self) -> str:
        return HOST

    @property
    def html_host(self) -> str:
        return HOST

    @property
    def features(self) -> FrozenSet[Feature]:
        return frozenset({Feature.PUBLIC, Feature.ANONYMOUS})

    async def upload_file(self, file: UploadFile, prefer_html_url: bool) -> str:
        body = await self._http.post_form(f'https://{HOST}', {'sprunge': file.content})
        url = body.strip()
        paste_id = self.id_from_raw_url(url)
        if paste_id is None:
            raise BackendError("sprunge returned an unexpected response", causes=[url[:200]])
        return self.format_raw_url(paste_id)

    def id_from_raw_url(self, url: str) -> Optional[str]:
        segments = url_segments(url, HOST)
        if not segments or len(segments) != 1:
            return None
        return segments[0]

    def id_from_html_url(self, url: str) -> Optional[str]:
        return self.id_from_raw_url(url)

    def format_raw_url(self, paste_id: str) -> str:
        return f'https://{HOST}/{paste_id}'

    def format_html_url(self, paste_id: str) -> str:
        return self.format_raw_url(paste_id)
