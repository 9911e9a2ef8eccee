"""Teardown of a VM and the resources it exclusively owns.

Order of a node cleanup:
1. Delete the VM and wait for it
2. Delete its NICs, then the public IPs those NICs carried
3. Delete its managed disks (all deletes issued before any is awaited)
4. Delete its availability set if this tool created it and it is now empty

Steps 2-4 run even when step 1 fails. The virtual network is never deleted
here: it belongs to the resource group and goes away with it.

Public API:
    CleanupResources: Teardown operations
    NodeCleanupReport: Per-step results of a node cleanup
"""

import logging
from dataclasses import dataclass

from azteardown.azure_api import AzureComputeApi
from azteardown.config import TeardownConfig
from azteardown.deletion import DeletionTally, Ok, Pending, ResourceDeleted, attempt
from azteardown.models import AvailabilitySet, ManagedDiskParameters, VirtualMachine
from azteardown.naming import GroupNamingConvention
from azteardown.resource_ids import ResourceGroupAndName

logger = logging.getLogger(__name__)

__all__ = ["CleanupResources", "NodeCleanupReport"]


@dataclass
class NodeCleanupReport:
    """Result of each step of a node cleanup."""

    node_id: str
    already_absent: bool = False
    vm_deleted: bool = False
    nics_deleted: bool = False
    disks_deleted: bool = False
    availability_set_deleted: bool = False

    @property
    def all_succeeded(self) -> bool:
        if self.already_absent:
            return True
        return (
            self.vm_deleted
            and self.nics_deleted
            and self.disks_deleted
            and self.availability_set_deleted
        )


class CleanupResources:
    """Delete VMs together with their dependent resources.

    Args:
        api: Provider access
        resource_deleted: Confirmation predicate for deletion jobs
        naming_convention: Derives shared resource names from group names
        config: Ownership tag settings
    """

    def __init__(
        self,
        api: AzureComputeApi,
        resource_deleted: ResourceDeleted,
        naming_convention: GroupNamingConvention,
        config: TeardownConfig | None = None,
    ) -> None:
        self.api = api
        self.resource_deleted = resource_deleted
        self.naming_convention = naming_convention
        self.config = config or TeardownConfig()

    @classmethod
    def from_config(cls, config: TeardownConfig) -> "CleanupResources":
        """Build against Azure using the given configuration."""
        api = AzureComputeApi.from_config(config)
        return cls(
            api,
            api.resource_deleted,
            GroupNamingConvention(config.naming_prefix, config.naming_delimiter),
            config,
        )

    def cleanup_node(self, node_id: str) -> bool:
        """Delete a VM and its dependent resources.

        Args:
            node_id: "<resource-group>/<vm-name>"

        Returns:
            True if the VM is gone. Failures of dependent resources are only
            logged; use cleanup_node_report() to inspect them.
        """
        return self.cleanup_node_report(node_id).vm_deleted

    def cleanup_node_report(self, node_id: str) -> NodeCleanupReport:
        """Delete a VM and its dependent resources, reporting every step.

        Args:
            node_id: "<resource-group>/<vm-name>"

        Returns:
            NodeCleanupReport

        Raises:
            ResourceIdError: If node_id is malformed
        """
        resource_group_and_name = ResourceGroupAndName.from_slash_encoded(node_id)
        resource_group = resource_group_and_name.resource_group

        vm = self.api.virtual_machines(resource_group).get(resource_group_and_name.name)
        if vm is None:
            logger.debug(f">> {node_id} does not exist, nothing to destroy")
            return NodeCleanupReport(node_id=node_id, already_absent=True, vm_deleted=True)

        logger.debug(f">> destroying {node_id} ...")
        report = NodeCleanupReport(node_id=node_id)
        report.vm_deleted = self._delete_virtual_machine(resource_group, vm)
        if not report.vm_deleted:
            logger.warning(f">> could not delete VM {node_id}")

        report.nics_deleted = self.cleanup_virtual_machine_nics(vm)
        report.disks_deleted = self.cleanup_managed_disks(vm)
        report.availability_set_deleted = self.cleanup_availability_set_if_orphaned(vm)

        return report

    def cleanup_virtual_machine_nics(self, vm: VirtualMachine) -> bool:
        """Delete every NIC of a VM and the public IPs attached to them.

        All NICs and public IPs are attempted even if some fail.

        Returns:
            True if every NIC and public IP was deleted
        """
        tally = DeletionTally()

        for nic_ref in vm.network_interfaces:
            nic_api = self.api.network_interfaces(nic_ref.resource_group)

            # Public IPs must be read before the NIC disappears
            nic = nic_api.get(nic_ref.name)
            public_ips = nic.public_ips() if nic is not None else []

            logger.debug(f">> destroying nic {nic_ref.name}...")
            tally.record(f"nic {nic_ref.name}", self.resource_deleted(nic_api.delete(nic_ref.name)))

            for public_ip in public_ips:
                logger.debug(f">> deleting public ip {public_ip.name}...")
                deleted = self.api.public_ip_addresses(public_ip.resource_group).delete(
                    public_ip.name
                )
                tally.record(f"public ip {public_ip.name}", deleted)

        if not tally.all_succeeded:
            logger.warning(f">> could not delete network resources: {', '.join(tally.failed())}")

        return tally.all_succeeded

    def cleanup_managed_disks(self, vm: VirtualMachine) -> bool:
        """Delete the OS disk and data disks of a VM that are managed disks.

        Every delete is issued before any of them is awaited so the provider can
        run them concurrently.

        Returns:
            True if every managed disk was deleted
        """
        delete_jobs: dict[str, Pending] = {}

        self._delete_managed_disk(vm.os_disk.managed_disk, delete_jobs)
        for data_disk in vm.data_disks:
            self._delete_managed_disk(data_disk.managed_disk, delete_jobs)

        non_deleted_disks = [
            name for name, job in delete_jobs.items() if not self.resource_deleted(job)
        ]
        if non_deleted_disks:
            logger.warning(f">> could not delete disks: {','.join(non_deleted_disks)}")

        return not non_deleted_disks

    def _delete_managed_disk(
        self, managed_disk: ManagedDiskParameters | None, delete_jobs: dict[str, Pending]
    ) -> None:
        if managed_disk is None:
            return

        disk_ref = managed_disk.reference()
        logger.debug(f">> deleting managed disk {disk_ref.name}...")
        job = self.api.disks(disk_ref.resource_group).delete(disk_ref.name)
        if isinstance(job, Pending):
            delete_jobs[disk_ref.name] = job

    def cleanup_security_group_if_orphaned(self, resource_group: str, group: str) -> bool:
        """Delete the shared security group of a group if no NIC uses it.

        Never raises: any error is logged as a warning and reported as False.

        Returns:
            True only if the security group was deleted
        """

        def delete_if_orphaned() -> bool:
            name = self.naming_convention.shared_name_for_group(group)
            security_group_api = self.api.network_security_groups(resource_group)

            security_group = security_group_api.get(name)
            if security_group is None or security_group.is_in_use():
                return False

            logger.debug(f">> deleting orphaned security group {name} from {resource_group}...")
            return self.resource_deleted(security_group_api.delete(name))

        result = attempt(
            delete_if_orphaned,
            f"Error deleting security groups for {resource_group} and group {group}",
        )
        return isinstance(result, Ok) and result.value

    def cleanup_availability_set_if_orphaned(self, vm: VirtualMachine) -> bool:
        """Delete the VM's availability set if this tool created it and it has no members.

        Returns:
            False only if an eligible availability set could not be deleted
        """
        availability_set_ref = vm.availability_set
        if availability_set_ref is None:
            return True

        name = availability_set_ref.name
        resource_group = availability_set_ref.resource_group
        availability_set_api = self.api.availability_sets(resource_group)

        if not self._is_orphaned(availability_set_api.get(name)):
            return True

        logger.debug(f">> deleting orphaned availability set {name} from {resource_group}...")
        return self.resource_deleted(availability_set_api.delete(name))

    def _is_orphaned(self, availability_set: AvailabilitySet | None) -> bool:
        # Only sets carrying our ownership tag were created by us
        return (
            availability_set is not None
            and availability_set.has_tag(
                self.config.ownership_tag_key, self.config.ownership_tag_value
            )
            and availability_set.is_empty()
        )

    def delete_resource_group_if_empty(self, group: str) -> bool:
        """Delete a resource group if it contains no resources.

        Returns:
            True if the group was deleted; False if it still has resources
        """
        resource_group_api = self.api.resource_groups()
        if resource_group_api.resources(group):
            return False

        logger.debug(f">> the resource group {group} is empty. Deleting...")
        return self.resource_deleted(resource_group_api.delete(group))

    def _delete_virtual_machine(self, resource_group: str, vm: VirtualMachine) -> bool:
        return self.resource_deleted(self.api.virtual_machines(resource_group).delete(vm.name))
