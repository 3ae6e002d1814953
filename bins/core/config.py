"""
Configuration module.

Loads the TOML config file (creating it from the packaged default on first
run) into frozen dataclasses that are shared read-only for the whole
process.
"""
import os
import tomllib
from dataclasses import dataclass, field, fields
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import ConfigError
from .logging import get_logger
from .size_limit import resolve_size_limit

logger = get_logger('bins.config')

CONFIG_NAME = 'bins.cfg'


@dataclass(frozen=True)
class GeneralConfig:
    """
    General settings.

    Attributes:
        file_size_limit: Raw size string (e.g. ``"1 MiB"``); ``None`` for no limit
        timeout: Seconds to wait for a paste service
    """
    file_size_limit: Optional[str] = None
    timeout: float = 30.0


@dataclass(frozen=True)
class SafetyConfig:
    """
    Safety policy.

    Attributes:
        warn_on_unsupported: Warn when a bin lacks a requested feature
        cancel_on_unsupported: Stop when a bin lacks a requested feature
        disallowed_file_patterns: Shell-style patterns of file names to refuse
        disallowed_file_types: libmagic type names (kept, not inspected)
    """
    warn_on_unsupported: bool = False
    cancel_on_unsupported: bool = False
    disallowed_file_patterns: Tuple[str, ...] = ()
    disallowed_file_types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DefaultsConfig:
    """Fallbacks used when the command line is silent."""
    bin: Optional[str] = None
    private: Optional[bool] = None
    authed: Optional[bool] = None


@dataclass(frozen=True)
class GistConfig:
    username: str = ''
    access_token: str = ''


@dataclass(frozen=True)
class PastebinConfig:
    api_key: str = ''


@dataclass(frozen=True)
class HastebinConfig:
    server: str = 'https://hastebin.com'


@dataclass(frozen=True)
class BitbucketConfig:
    username: str = ''
    app_password: str = ''


@dataclass(frozen=True)
class PasteGgConfig:
    key: str = ''


_SECTION_TYPES = {
    'general': GeneralConfig,
    'safety': SafetyConfig,
    'defaults': DefaultsConfig,
    'gist': GistConfig,
    'pastebin': PastebinConfig,
    'hastebin': HastebinConfig,
    'bitbucket': BitbucketConfig,
    'pastegg': PasteGgConfig,
}

# Expected value types per field, used to reject e.g. `private = "yes"`.
_FIELD_TYPES: Dict[str, Tuple[type, ...]] = {
    'file_size_limit': (str,),
    'timeout': (int, float),
    'warn_on_unsupported': (bool,),
    'cancel_on_unsupported': (bool,),
    'disallowed_file_patterns': (list,),
    'disallowed_file_types': (list,),
    'bin': (str,),
    'private': (bool,),
    'authed': (bool,),
}


@dataclass(frozen=True)
class Config:
    """
    Complete bins configuration.

    Example:
        >>> config = Config.from_dict({'defaults': {'bin': 'gist'}})
        >>> config.defaults.bin
        'gist'
    """
    general: GeneralConfig = field(default_factory=GeneralConfig)
    safety: SafetyConfig = field(default_factory=SafetyConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    gist: GistConfig = field(default_factory=GistConfig)
    pastebin: PastebinConfig = field(default_factory=PastebinConfig)
    hastebin: HastebinConfig = field(default_factory=HastebinConfig)
    bitbucket: BitbucketConfig = field(default_factory=BitbucketConfig)
    pastegg: PasteGgConfig = field(default_factory=PasteGgConfig)

    @classmethod
    def default(cls) -> 'Config':
        """Create an empty configuration: no limits, no policy, no default bin."""
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Config':
        """
        Build from parsed TOML.

        Unknown sections and keys are ignored.

        Raises:
            ConfigError: If a known key has a value of the wrong type
        """
        sections = {}
        for name, section_type in _SECTION_TYPES.items():
            raw = data.get(name, {})
            if not isinstance(raw, Mapping):
                raise ConfigError("could not parse configuration file", causes=[f"[{name}] must be a table"])
            sections[name] = _build_section(name, section_type, raw)
        return cls(**sections)

    @property
    def file_size_limit(self) -> Optional[int]:
        """Parsed size limit in bytes, ``None`` for unlimited."""
        return resolve_size_limit(self.general.file_size_limit)


def _build_section(name: str, section_type: type, raw: Mapping[str, Any]):
    kwargs = {}
    for f in fields(section_type):
        if f.name not in raw:
            continue
        value = raw[f.name]
        expected = _FIELD_TYPES.get(f.name, (str,))
        # bool is an int subclass; only accept it where bool is expected
        if not isinstance(value, expected) or (isinstance(value, bool) and bool not in expected):
            raise ConfigError(
                "could not parse configuration file",
                causes=[f"{name}.{f.name} has an invalid value: {value!r}"]
            )
        if isinstance(value, list):
            value = tuple(str(v) for v in value)
        kwargs[f.name] = value
    return section_type(**kwargs)


def default_config_text() -> str:
    """Returns the packaged default config file."""
    return resources.files('bins').joinpath('default_config.toml').read_text(encoding='utf-8')


def _home() -> Optional[Path]:
    home = os.environ.get('HOME')
    return Path(home) if home else None


def candidate_paths() -> List[Path]:
    """
    Config file locations in search order.

    ``$XDG_CONFIG_DIR/bins.cfg``, ``~/.config/bins.cfg``, ``~/.bins.cfg``.
    """
    paths = []
    xdg = os.environ.get('XDG_CONFIG_DIR')
    if xdg:
        paths.append(Path(xdg) / CONFIG_NAME)
    home = _home()
    if home is not None:
        paths.append(home / '.config' / CONFIG_NAME)
        paths.append(home / f'.{CONFIG_NAME}')
    return paths


def find_config_path() -> Optional[Path]:
    """Returns the first existing config file, if any."""
    for path in candidate_paths():
        if path.exists():
            return path
    return None


def create_config_file() -> Path:
    """
    Write the default config to the first location whose directory exists.

    Raises:
        ConfigError: If no location is writable
    """
    causes = []
    for path in candidate_paths():
        if not path.parent.is_dir():
            continue
        try:
            path.write_text(default_config_text(), encoding='utf-8')
        except OSError as e:
            causes.append(f"could not create {path}: {e}")
            continue
        logger.info(f"created default config file at {path}")
        return path
    raise ConfigError("could not find a location to create the bins config file", causes=causes)


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load configuration, creating the default file when none exists.

    Args:
        path: Explicit config file path (skips the search)

    Raises:
        ConfigError: If the file cannot be created, read or parsed
    """
    if path is None:
        path = find_config_path() or create_config_file()
    logger.debug(f"loading config from {path}")
    try:
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError.wrap(e, f"could not read configuration file {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError.wrap(e, "could not parse configuration file") from e
    return Config.from_dict(data)
