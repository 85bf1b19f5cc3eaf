"""Global configuration shared by every mock.

GlobalConfig is a frozen dataclass. MockExtended swaps the active instance,
so a change is visible to mocks that already exist.
"""

import logging
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)

# Qualified-name prefixes of matcher types owned by other libraries
DEFAULT_FOREIGN_MATCHERS = (
    "unittest.mock._ANY",
    "_pytest.python_api.Approx",
    "hamcrest.",
    "dirty_equals.",
)


@dataclass(frozen=True, slots=True)
class GlobalConfig:
    """Settings read by proxies and the argument matcher at call time.

    Override what you need::

        MockExtended.configure(ignore_props=("then",))
    """

    # Attribute names a proxy refuses to materialise
    ignore_props: tuple[str, ...] = ()
    # Matcher types rejected by called_with()
    foreign_matchers: tuple[str, ...] = DEFAULT_FOREIGN_MATCHERS


class MockExtended:
    """Entry point for reading and changing the global configuration."""

    default_config = GlobalConfig()
    config = default_config

    @classmethod
    def configure(cls, **changes) -> GlobalConfig:
        """Replace fields of the active configuration.

        Args:
            **changes: GlobalConfig field names and their new values

        Returns:
            The new active configuration
        """
        cls.config = replace(cls.config, **changes)
        logger.debug(f"Configuration changed: {cls.config}")
        return cls.config

    @classmethod
    def reset_config(cls) -> GlobalConfig:
        """Restore the default configuration."""
        cls.config = cls.default_config
        return cls.config
