"""GitHub gists: multi-file pastes through the REST API."""
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..core.exceptions import BackendError
from ..core.features import Feature
from ..core.files import PasteFile, PasteUrl, UploadFile
from .base import MultiFileBin, url_segments

API_URL = 'https://api.github.com/gists'
RAW_HOST = 'gist.githubusercontent.com'
HTML_HOST = 'gist.github.com'


class Gist(MultiFileBin):
    """
    Gist bin.

    GitHub requires a token to create gists, so ``Authed`` is only
    advertised when ``[gist] access_token`` is set. Raw file URLs carry a
    revision hash and can only be discovered through the API.
    """

    @property
    def name(self) -> str:
        return 'gist'

    @property
    def raw_host(self) -> str:
        return RAW_HOST

    @property
    def html_host(self) -> str:
        return HTML_HOST

    @property
    def features(self) -> FrozenSet[Feature]:
        features = {Feature.PUBLIC, Feature.PRIVATE, Feature.SINGLE_NAMING}
        if self._config.gist.access_token:
            features.add(Feature.AUTHED)
        return frozenset(features)

    def _headers(self, require_token: bool = False) -> Dict[str, str]:
        headers = {'Accept': 'application/vnd.github+json'}
        token = self._config.gist.access_token
        if token and (self.authed or require_token):
            headers['Authorization'] = f'token {token}'
        elif require_token:
            raise BackendError(
                "gist uploads need an access token",
                causes=["set [gist] access_token in the config file"]
            )
        return headers

    async def _get_gist(self, paste_id: str) -> Dict[str, Any]:
        data = await self._http.get_json(f'{API_URL}/{paste_id}', headers=self._headers())
        if not isinstance(data, dict) or not isinstance(data.get('files'), dict):
            raise BackendError("gist API returned an unexpected response", causes=[str(data)[:200]])
        return data

    @staticmethod
    def _file_entries(data: Dict[str, Any]) -> List[Tuple[str, str, Dict[str, Any]]]:
        """(file name, raw URL, file object) for every file of a gist."""
        entries = []
        try:
            for name, info in data['files'].items():
                entries.append((info.get('filename', name), info['raw_url'], info))
        except (KeyError, TypeError, AttributeError) as e:
            raise BackendError.wrap(e, "gist API returned an unexpected response") from e
        return entries

    async def upload(self, files: Sequence[UploadFile], prefer_html_url: bool) -> List[PasteUrl]:
        payload = {
            'description': '',
            'public': not self.private,
            'files': {f.name: {'content': f.content} for f in files},
        }
        data = await self._http.post_json(API_URL, payload, headers=self._headers(require_token=True))
        try:
            if prefer_html_url:
                return [PasteUrl(data['html_url'])]
            return [PasteUrl(f['raw_url'], name) for name, f in data['files'].items()]
        except (KeyError, TypeError, AttributeError) as e:
            raise BackendError.wrap(e, "gist API returned an unexpected response") from e

    async def fetch_files(self, paste_id: str) -> List[PasteFile]:
        data = await self._get_gist(paste_id)
        files = []
        for name, raw_url, info in self._file_entries(data):
            content = info.get('content')
            if not isinstance(content, str) or info.get('truncated'):
                content = await self._http.get_text(raw_url)
            files.append(PasteFile(name, content))
        return files

    def id_from_raw_url(self, url: str) -> Optional[str]:
        # https://gist.githubusercontent.com/<user>/<id>/raw[/<revision>]/<file>
        segments = url_segments(url, RAW_HOST)
        if segments is None or len(segments) < 3 or segments[2] != 'raw':
            return None
        return segments[1]

    def id_from_html_url(self, url: str) -> Optional[str]:
        # https://gist.github.com/<id> or https://gist.github.com/<user>/<id>
        segments = url_segments(url, HTML_HOST)
        if segments is None or len(segments) not in (1, 2):
            return None
        return segments[-1]

    async def create_raw_url(self, paste_id: str) -> List[PasteUrl]:
        data = await self._get_gist(paste_id)
        return [PasteUrl(raw_url, name) for name, raw_url, _ in self._file_entries(data)]

    async def create_html_url(self, paste_id: str) -> List[PasteUrl]:
        return [PasteUrl(f'https://{HTML_HOST}/{paste_id}')]
