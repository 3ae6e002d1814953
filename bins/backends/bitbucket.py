"""Bitbucket snippets: multi-file pastes through the 2.0 REST API."""
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..core.exceptions import BackendError
from ..core.features import Feature
from ..core.files import PasteFile, PasteUrl, UploadFile
from .base import MultiFileBin, url_segments
from .http import basic_auth

API_HOST = 'api.bitbucket.org'
API_URL = f'https://{API_HOST}/2.0/snippets'
HTML_HOST = 'bitbucket.org'


class Bitbucket(MultiFileBin):
    """
    Bitbucket snippet bin.

    Snippets are addressed by workspace and snippet ID, so paste IDs here
    are ``<workspace>/<id>``. Creating a snippet needs ``[bitbucket]
    username`` and ``app_password``; public snippets can be read without.
    """

    @property
    def name(self) -> str:
        return 'bitbucket'

    @property
    def raw_host(self) -> str:
        return API_HOST

    @property
    def html_host(self) -> str:
        return HTML_HOST

    @property
    def features(self) -> FrozenSet[Feature]:
        features = {Feature.PUBLIC, Feature.PRIVATE, Feature.SINGLE_NAMING}
        if self._has_credentials():
            features.add(Feature.AUTHED)
        return frozenset(features)

    def _has_credentials(self) -> bool:
        section = self._config.bitbucket
        return bool(section.username and section.app_password)

    def _headers(self, require_auth: bool = False) -> Dict[str, str]:
        section = self._config.bitbucket
        if self._has_credentials() and (self.authed or require_auth):
            return {'Authorization': basic_auth(section.username, section.app_password)}
        if require_auth:
            raise BackendError(
                "bitbucket uploads need a username and app password",
                causes=["set [bitbucket] username and app_password in the config file"]
            )
        return {}

    @staticmethod
    def _file_links(data: Any) -> List[Tuple[str, str]]:
        """(file name, content URL) for every file of a snippet."""
        try:
            return [(name, info['links']['self']['href']) for name, info in data['files'].items()]
        except (KeyError, TypeError, AttributeError) as e:
            raise BackendError.wrap(e, "bitbucket returned an unexpected response") from e

    async def _get_snippet(self, paste_id: str) -> Dict[str, Any]:
        return await self._http.get_json(f'{API_URL}/{paste_id}', headers=self._headers())

    async def upload(self, files: Sequence[UploadFile], prefer_html_url: bool) -> List[PasteUrl]:
        fields = {
            'title': files[0].name if len(files) == 1 else '',
            'is_private': 'true' if self.private else 'false',
        }
        parts = [('file', f.name, f.content) for f in files]
        data = await self._http.post_multipart(API_URL, fields, parts, headers=self._headers(require_auth=True))
        if prefer_html_url:
            try:
                return [PasteUrl(data['links']['html']['href'])]
            except (KeyError, TypeError) as e:
                raise BackendError.wrap(e, "bitbucket returned an unexpected response") from e
        return [PasteUrl(url, name) for name, url in self._file_links(data)]

    async def fetch_files(self, paste_id: str) -> List[PasteFile]:
        data = await self._get_snippet(paste_id)
        files = []
        for name, url in self._file_links(data):
            files.append(PasteFile(name, await self._http.get_text(url, headers=self._headers())))
        return files

    def id_from_raw_url(self, url: str) -> Optional[str]:
        # https://api.bitbucket.org/2.0/snippets/<workspace>/<id>[/<revision>]/files/<path>
        segments = url_segments(url, API_HOST)
        if segments is None or len(segments) < 6 or segments[:2] != ['2.0', 'snippets']:
            return None
        if 'files' not in segments[4:6]:
            return None
        return f'{segments[2]}/{segments[3]}'

    def id_from_html_url(self, url: str) -> Optional[str]:
        # https://bitbucket.org/snippets/<workspace>/<id>[/<slug>]
        segments = url_segments(url, HTML_HOST)
        if segments is None or len(segments) not in (3, 4) or segments[0] != 'snippets':
            return None
        return f'{segments[1]}/{segments[2]}'

    async def create_raw_url(self, paste_id: str) -> List[PasteUrl]:
        data = await self._get_snippet(paste_id)
        return [PasteUrl(url, name) for name, url in self._file_links(data)]

    async def create_html_url(self, paste_id: str) -> List[PasteUrl]:
        return [PasteUrl(f'https://{HTML_HOST}/snippets/{paste_id}')]
