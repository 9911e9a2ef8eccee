"""Read-only snapshots of the provider resources azteardown inspects.

Each model is built from the corresponding azure-mgmt SDK object with a
from_sdk() classmethod. Only the fields needed to decide what to delete are
kept; the provider remains the owner of the resource.
"""

from dataclasses import dataclass, field
from typing import Any

from azteardown.resource_ids import IdReference

__all__ = [
    "AvailabilitySet",
    "DataDisk",
    "IpConfiguration",
    "ManagedDiskParameters",
    "NetworkInterfaceCard",
    "NetworkSecurityGroup",
    "OSDisk",
    "VirtualMachine",
]


def _references(items: Any) -> list[IdReference]:
    """Convert a list of SDK sub-resources to IdReferences, skipping ones without id."""
    return [IdReference.create(item.id) for item in items or [] if getattr(item, "id", None)]


@dataclass(frozen=True)
class ManagedDiskParameters:
    """Managed disk reference carried by an OS or data disk."""

    id: str

    def reference(self) -> IdReference:
        return IdReference.create(self.id)

    @classmethod
    def from_sdk(cls, managed_disk: Any) -> "ManagedDiskParameters | None":
        if managed_disk is None or not getattr(managed_disk, "id", None):
            return None
        return cls(id=managed_disk.id)


@dataclass(frozen=True)
class OSDisk:
    """Operating system disk of a VM."""

    name: str | None
    managed_disk: ManagedDiskParameters | None = None

    @classmethod
    def from_sdk(cls, os_disk: Any) -> "OSDisk":
        if os_disk is None:
            return cls(name=None)
        return cls(
            name=getattr(os_disk, "name", None),
            managed_disk=ManagedDiskParameters.from_sdk(getattr(os_disk, "managed_disk", None)),
        )


@dataclass(frozen=True)
class DataDisk:
    """Data disk attached to a VM."""

    name: str | None
    managed_disk: ManagedDiskParameters | None = None

    @classmethod
    def from_sdk(cls, data_disk: Any) -> "DataDisk":
        return cls(
            name=getattr(data_disk, "name", None),
            managed_disk=ManagedDiskParameters.from_sdk(getattr(data_disk, "managed_disk", None)),
        )


@dataclass(frozen=True)
class VirtualMachine:
    """Snapshot of a virtual machine and the resources it references."""

    name: str
    resource_group: str
    network_interfaces: list[IdReference] = field(default_factory=list)
    os_disk: OSDisk = field(default_factory=lambda: OSDisk(name=None))
    data_disks: list[DataDisk] = field(default_factory=list)
    availability_set: IdReference | None = None

    @classmethod
    def from_sdk(cls, vm: Any, resource_group: str) -> "VirtualMachine":
        """Build from an azure.mgmt.compute VirtualMachine.

        Args:
            vm: SDK virtual machine object
            resource_group: Resource group the VM was fetched from

        Returns:
            VirtualMachine snapshot
        """
        network_profile = getattr(vm, "network_profile", None)
        storage_profile = getattr(vm, "storage_profile", None)
        availability_set = getattr(vm, "availability_set", None)

        return cls(
            name=vm.name,
            resource_group=resource_group,
            network_interfaces=_references(
                getattr(network_profile, "network_interfaces", None)
            ),
            os_disk=OSDisk.from_sdk(getattr(storage_profile, "os_disk", None)),
            data_disks=[
                DataDisk.from_sdk(disk)
                for disk in getattr(storage_profile, "data_disks", None) or []
            ],
            availability_set=(
                IdReference.create(availability_set.id)
                if availability_set is not None and getattr(availability_set, "id", None)
                else None
            ),
        )


@dataclass(frozen=True)
class IpConfiguration:
    """IP configuration of a NIC."""

    name: str | None
    public_ip_address: IdReference | None = None


@dataclass(frozen=True)
class NetworkInterfaceCard:
    """Snapshot of a network interface."""

    name: str
    ip_configurations: list[IpConfiguration] = field(default_factory=list)

    def public_ips(self) -> list[IdReference]:
        """Public IPs attached to any IP configuration, in order, without duplicates."""
        public_ips: list[IdReference] = []
        for ip_configuration in self.ip_configurations:
            public_ip = ip_configuration.public_ip_address
            if public_ip is not None and public_ip not in public_ips:
                public_ips.append(public_ip)
        return public_ips

    @classmethod
    def from_sdk(cls, nic: Any) -> "NetworkInterfaceCard":
        configurations = []
        for ip_configuration in getattr(nic, "ip_configurations", None) or []:
            public_ip = getattr(ip_configuration, "public_ip_address", None)
            configurations.append(
                IpConfiguration(
                    name=getattr(ip_configuration, "name", None),
                    public_ip_address=(
                        IdReference.create(public_ip.id)
                        if public_ip is not None and getattr(public_ip, "id", None)
                        else None
                    ),
                )
            )
        return cls(name=nic.name, ip_configurations=configurations)


@dataclass(frozen=True)
class AvailabilitySet:
    """Snapshot of an availability set."""

    name: str
    tags: dict[str, str] | None = None
    virtual_machines: list[IdReference] | None = None

    def has_tag(self, key: str, value: str) -> bool:
        return self.tags is not None and self.tags.get(key) == value

    def is_empty(self) -> bool:
        return not self.virtual_machines

    @classmethod
    def from_sdk(cls, availability_set: Any) -> "AvailabilitySet":
        members = getattr(availability_set, "virtual_machines", None)
        return cls(
            name=availability_set.name,
            tags=dict(availability_set.tags) if getattr(availability_set, "tags", None) else None,
            virtual_machines=_references(members) if members is not None else None,
        )


@dataclass(frozen=True)
class NetworkSecurityGroup:
    """Snapshot of a network security group."""

    name: str
    network_interfaces: list[IdReference] | None = None

    def is_in_use(self) -> bool:
        return bool(self.network_interfaces)

    @classmethod
    def from_sdk(cls, security_group: Any) -> "NetworkSecurityGroup":
        nics = getattr(security_group, "network_interfaces", None)
        return cls(
            name=security_group.name,
            network_interfaces=_references(nics) if nics is not None else None,
        )
