"""paste.gg: multi-file pastes, anonymous or tied to an API key."""
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from ..core.exceptions import BackendError
from ..core.features import Feature
from ..core.files import PasteFile, PasteUrl, UploadFile
from .base import MultiFileBin, url_segments

HOST = 'paste.gg'
API_URL = 'https://api.paste.gg/v1/pastes'


class PasteGg(MultiFileBin):
    """
    paste.gg bin.

    Pages live at ``/p/<author>/<id>``, raw files at
    ``/p/<author>/<id>/files/<file id>/raw``.
    """

    @property
    def name(self) -> str:
        return 'pastegg'

    @property
    def raw_host(self) -> str:
        return HOST

    @property
    def html_host(self) -> str:
        return HOST

    @property
    def features(self) -> FrozenSet[Feature]:
        features = {Feature.PUBLIC, Feature.PRIVATE, Feature.ANONYMOUS, Feature.SINGLE_NAMING}
        if self._config.pastegg.key:
            features.add(Feature.AUTHED)
        return frozenset(features)

    def _headers(self) -> Dict[str, str]:
        key = self._config.pastegg.key
        if key and self.authed:
            return {'Authorization': f'Key {key}'}
        return {}

    @staticmethod
    def _result(data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict) or data.get('status') != 'success' or not isinstance(data.get('result'), dict):
            message = data.get('message') or data.get('error') if isinstance(data, dict) else None
            raise BackendError("paste.gg returned an error", causes=[str(message or data)[:200]])
        return data['result']

    @staticmethod
    def _author(result: Dict[str, Any]) -> str:
        author = result.get('author') or {}
        return author.get('username') or 'anonymous'

    def _html_url(self, result: Dict[str, Any]) -> PasteUrl:
        try:
            return PasteUrl(f"https://{HOST}/p/{self._author(result)}/{result['id']}")
        except (KeyError, TypeError, AttributeError) as e:
            raise BackendError.wrap(e, "paste.gg returned an unexpected response") from e

    def _raw_urls(self, result: Dict[str, Any]) -> List[PasteUrl]:
        try:
            author = self._author(result)
            return [
                PasteUrl(f"https://{HOST}/p/{author}/{result['id']}/files/{f['id']}/raw", f.get('name'))
                for f in result.get('files', [])
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise BackendError.wrap(e, "paste.gg returned an unexpected response") from e

    async def _get_paste(self, paste_id: str) -> Dict[str, Any]:
        data = await self._http.get_json(f'{API_URL}/{paste_id}', headers=self._headers())
        return self._result(data)

    async def upload(self, files: Sequence[UploadFile], prefer_html_url: bool) -> List[PasteUrl]:
        payload = {
            'visibility': 'unlisted' if self.private else 'public',
            'files': [
                {'name': f.name, 'content': {'format': 'text', 'value': f.content}}
                for f in files
            ],
        }
        result = self._result(await self._http.post_json(API_URL, payload, headers=self._headers()))
        if prefer_html_url:
            return [self._html_url(result)]
        return self._raw_urls(result)

    async def fetch_files(self, paste_id: str) -> List[PasteFile]:
        data = await self._http.get_json(f'{API_URL}/{paste_id}', headers=self._headers(), params={'full': 'true'})
        result = self._result(data)
        try:
            return [PasteFile(f['name'], f['content']['value']) for f in result.get('files', [])]
        except (KeyError, TypeError, AttributeError) as e:
            raise BackendError.wrap(e, "paste.gg returned an unexpected response") from e

    def id_from_raw_url(self, url: str) -> Optional[str]:
        segments = url_segments(url, HOST)
        if segments is None or len(segments) != 6 or segments[0] != 'p' or segments[3] != 'files' or segments[5] != 'raw':
            return None
        return segments[2]

    def id_from_html_url(self, url: str) -> Optional[str]:
        segments = url_segments(url, HOST)
        if segments is None or len(segments) != 3 or segments[0] != 'p':
            return None
        return segments[2]

    async def create_raw_url(self, paste_id: str) -> List[PasteUrl]:
        return self._raw_urls(await self._get_paste(paste_id))

    async def create_html_url(self, paste_id: str) -> List[PasteUrl]:
        # the page path carries the owner, which only the API knows
        return [self._html_url(await self._get_paste(paste_id))]
