"""Resource identifier parsing.

Two identifier shapes are used throughout azteardown:

- ResourceGroupAndName: the compound "<resource-group>/<name>" key that callers
  pass to identify a VM.
- IdReference: an ARM resource path as returned by the provider, e.g.
  /subscriptions/<sub>/resourceGroups/<rg>/providers/Microsoft.Network/networkInterfaces/<name>

Public API:
    ResourceGroupAndName: Compound group/name key
    IdReference: Resource locator parsed from an ARM path
    ResourceIdError: Raised for malformed identifiers
"""

from dataclasses import dataclass

__all__ = [
    "IdReference",
    "ResourceGroupAndName",
    "ResourceIdError",
]


class ResourceIdError(ValueError):
    """Raised when a resource identifier cannot be parsed."""

    pass


@dataclass(frozen=True)
class ResourceGroupAndName:
    """Compound identifier of a resource within a resource group."""

    resource_group: str
    name: str

    def __post_init__(self) -> None:
        if not self.resource_group or not self.resource_group.strip():
            raise ResourceIdError("Resource group cannot be empty")
        if not self.name or not self.name.strip():
            raise ResourceIdError("Resource name cannot be empty")
        if "/" in self.resource_group or "/" in self.name:
            raise ResourceIdError(
                f"Invalid identifier parts '{self.resource_group}', '{self.name}': "
                "slashes not allowed"
            )

    @classmethod
    def from_slash_encoded(cls, encoded: str) -> "ResourceGroupAndName":
        """Parse a "<resource-group>/<name>" identifier.

        Args:
            encoded: Slash-encoded identifier (whitespace is trimmed)

        Returns:
            Parsed ResourceGroupAndName

        Raises:
            ResourceIdError: If the identifier does not have exactly two non-empty parts
        """
        encoded = encoded.strip()

        if not encoded:
            raise ResourceIdError("Identifier cannot be empty")

        if encoded.count("/") != 1:
            raise ResourceIdError(
                f"Invalid identifier '{encoded}': expected <resource-group>/<name>"
            )

        resource_group, name = encoded.split("/", 1)
        return cls(resource_group=resource_group.strip(), name=name.strip())

    def slash_encoded(self) -> str:
        """Encode as "<resource-group>/<name>"."""
        return f"{self.resource_group}/{self.name}"

    def __str__(self) -> str:
        return self.slash_encoded()


@dataclass(frozen=True)
class IdReference:
    """Locator for a provider resource, parsed from its ARM id."""

    id: str
    resource_group: str | None
    name: str | None

    @classmethod
    def create(cls, resource_id: str) -> "IdReference":
        """Parse an ARM resource id.

        The resource group is the segment following "resourceGroups" (matched
        case-insensitively, the provider returns both "resourceGroups" and
        "resourcegroups"). The name is the segment following the top-level
        resource type under "providers/<namespace>/<type>". Child resource
        segments, if any, are ignored.

        Args:
            resource_id: ARM resource id

        Returns:
            IdReference with parts that could not be found set to None
        """
        segments = [s for s in resource_id.split("/") if s]
        lowered = [s.lower() for s in segments]

        resource_group = None
        if "resourcegroups" in lowered:
            index = lowered.index("resourcegroups")
            if index + 1 < len(segments):
                resource_group = segments[index + 1]

        name = None
        if "providers" in lowered:
            # providers/<namespace>/<type>/<name>
            index = lowered.index("providers")
            if index + 3 < len(segments):
                name = segments[index + 3]
        elif resource_group is not None and len(segments) == lowered.index("resourcegroups") + 2:
            # A bare resource group id names the group itself
            name = resource_group

        return cls(id=resource_id, resource_group=resource_group, name=name)

    def __str__(self) -> str:
        return self.id
