"""
bins - upload to and download from paste hosting services.

Usage:
    >>> from bins import Bins, load_config, CommandLineOptions
    >>>
    >>> config = load_config()
    >>> options = CommandLineOptions(bin='gist', message='hello')
    >>> print(asyncio.run(Bins(config, options).main()))
"""
import logging

from .core.config import Config, load_config
from .core.options import CommandLineOptions, UrlOutputMode
from .core.features import Feature
from .core.files import UploadFile, PasteFile, Paste, PasteUrl, DownloadInfo
from .core.range import RangeSelector
from .core.size_limit import parse_size_limit
from .core.dispatcher import Bins
from .core.exceptions import BinsError
from .core.logging import create_handler

__version__ = '2.0.0'

_MODULE_LOGGERS = [
    'bins.cli',
    'bins.config',
    'bins.dispatcher',
    'bins.features',
    'bins.http',
    'bins.materializer',
]


def setup_logging(level=logging.INFO):
    """
    Configure logging for bins modules.

    Installs a single stderr handler on the ``bins`` logger so that
    warnings and errors never mix with the tool's stdout output.

    Args:
        level: Logging level (default: logging.INFO)
    """
    logger = logging.getLogger('bins')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(create_handler(level))
    logger.setLevel(level)
    logger.propagate = False

    # Module loggers may have been pinned to WARNING by get_logger()
    for logger_name in _MODULE_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)


__all__ = [
    'Bins',
    'Config',
    'load_config',
    'CommandLineOptions',
    'UrlOutputMode',
    'Feature',
    'UploadFile',
    'PasteFile',
    'Paste',
    'PasteUrl',
    'DownloadInfo',
    'RangeSelector',
    'parse_size_limit',
    'BinsError',
    'setup_logging',
]
