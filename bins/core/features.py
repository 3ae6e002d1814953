"""
Bin capabilities and the safety checks that gate uploads against them.
"""
from enum import Enum
from typing import Dict, Optional, FrozenSet

from .exceptions import UnsupportedFeature
from .logging import get_logger

logger = get_logger('bins.features')


class Feature(str, Enum):
    """Capability a bin may advertise."""

    PUBLIC = 'public'
    PRIVATE = 'private'
    AUTHED = 'authed'
    ANONYMOUS = 'anonymous'
    SINGLE_NAMING = 'single naming'

    def __str__(self) -> str:
        return self.value


def requested_features(options) -> Dict[Feature, Optional[bool]]:
    """
    Map command-line intent to a tri-state value per feature.

    ``True`` means requested, ``False`` means the opposite was requested,
    ``None`` means the user said nothing about it.

    Args:
        options: CommandLineOptions

    Returns:
        Dictionary of Feature -> Optional[bool]
    """
    private = options.private
    authed = options.authed
    return {
        Feature.PRIVATE: private,
        Feature.PUBLIC: None if private is None else not private,
        Feature.AUTHED: authed,
        Feature.ANONYMOUS: None if authed is None else not authed,
        Feature.SINGLE_NAMING: True if options.name is not None else None,
    }


class FeatureNegotiator:
    """
    Checks requested features against what a bin supports.

    Runs once before any upload I/O. With ``warn_on_unsupported`` each
    mismatch is logged; with ``cancel_on_unsupported`` the first mismatch
    aborts the upload unless ``force`` is set.
    """

    def __init__(self, safety, options):
        """
        Args:
            safety: SafetyConfig carrying the policy flags
            options: CommandLineOptions carrying the request and force flag
        """
        self._safety = safety
        self._options = options

    def check(self, bin_name: str, supported: FrozenSet[Feature]) -> None:
        """
        Enforce the safety policy for one bin.

        Raises:
            UnsupportedFeature: If a requested feature is missing, the cancel
                policy is active and the upload is not forced
        """
        for feature, status in requested_features(self._options).items():
            if status is not True or feature in supported:
                continue
            if self._safety.warn_on_unsupported:
                logger.warning(f"{bin_name} does not support {feature} pastes")
            if self._safety.cancel_on_unsupported:
                if self._options.force:
                    logger.warning("forcing upload with unsupported features")
                    return
                raise UnsupportedFeature(
                    f"bins stopped because {bin_name} does not support {feature} pastes",
                    bin_name=bin_name,
                    feature=feature
                )
