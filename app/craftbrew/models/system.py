"""System type presets.

A system type names a fixed, ordered list of manifests that together make
up the active package scope for a machine profile.
"""

from enum import Enum

from craftbrew.core.errors import UnknownSystemTypeError


class SystemType(str, Enum):
    """Named preset selecting which manifests compose the active scope."""

    BASE = "base"
    DEV = "dev"
    PRODUCTIVITY = "productivity"
    UTILITIES = "utilities"
    ALL = "all"

    @property
    def manifest_names(self) -> tuple[str, ...]:
        """Ordered manifest names (without suffix) for this preset."""
        return SYSTEM_MANIFESTS[self]


SYSTEM_MANIFESTS: dict[SystemType, tuple[str, ...]] = {
    SystemType.BASE: ("base",),
    SystemType.DEV: ("base", "dev"),
    SystemType.PRODUCTIVITY: ("base", "productivity"),
    SystemType.UTILITIES: ("base", "utilities"),
    SystemType.ALL: ("base", "dev", "productivity", "utilities"),
}


def parse_system_type(value: str) -> SystemType:
    """Convert a string to a SystemType.

    Args:
        value: System type name (case-insensitive).

    Returns:
        Matching SystemType member.

    Raises:
        UnknownSystemTypeError: If value is not a recognized preset.
    """
    try:
        return SystemType(value.strip().lower())
    except ValueError:
        raise UnknownSystemTypeError(value, [t.value for t in SystemType]) from None
