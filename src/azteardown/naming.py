"""Naming convention for resources shared by a group of VMs."""

import re

__all__ = ["GroupNamingConvention", "NamingError"]


class NamingError(ValueError):
    """Raised when a group name cannot be used to derive a resource name."""

    pass


class GroupNamingConvention:
    """Derive provider resource names from a logical group name.

    Shared resources (e.g. the security group used by every VM of a group) are
    named "<prefix><delimiter><group>", lowercased.
    """

    # Azure network resource names: alphanumerics, underscore, hyphen, period
    GROUP_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")

    def __init__(self, prefix: str = "azteardown", delimiter: str = "-") -> None:
        self.prefix = prefix
        self.delimiter = delimiter

    def shared_name_for_group(self, group: str) -> str:
        group = group.strip()
        if not group or not self.GROUP_PATTERN.match(group):
            raise NamingError(f"Invalid group name: '{group}'")
        return f"{self.prefix}{self.delimiter}{group}".lower()
