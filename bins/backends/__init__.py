"""Paste hosting backends."""
from typing import Dict, Iterable

from ..core.exceptions import ConfigError
from .base import Bin, SingleFileBin, MultiFileBin, select_files
from .http import HttpClient
from .sprunge import Sprunge
from .hastebin import Hastebin
from .pastebin import Pastebin
from .gist import Gist
from .pastegg import PasteGg
from .bitbucket import Bitbucket

BIN_TYPES = (Sprunge, Hastebin, Pastebin, Gist, Bitbucket, PasteGg)


def registry(bins: Iterable[Bin]) -> Dict[str, Bin]:
    """
    Key bins by name, sorted.

    Raises:
        ValueError: If two bins share a name
        ConfigError: If two bins share a hostname
    """
    by_name: Dict[str, Bin] = {}
    owners: Dict[str, str] = {}
    for b in bins:
        if b.name in by_name:
            raise ValueError(f"duplicate bin name: {b.name}")
        for host in {b.raw_host, b.html_host}:
            if host in owners:
                raise ConfigError(f"{b.name} and {owners[host]} both use the hostname {host}")
            owners[host] = b.name
        by_name[b.name] = b
    return dict(sorted(by_name.items()))


def create_bins(http: HttpClient, config=None, options=None) -> Dict[str, Bin]:
    """Build every known bin around the shared client, config and options."""
    return registry(t(http, config, options) for t in BIN_TYPES)


__all__ = [
    'Bin',
    'SingleFileBin',
    'MultiFileBin',
    'select_files',
    'HttpClient',
    'Sprunge',
    'Hastebin',
    'Pastebin',
    'Gist',
    'PasteGg',
    'Bitbucket',
    'BIN_TYPES',
    'registry',
    'create_bins',
]
