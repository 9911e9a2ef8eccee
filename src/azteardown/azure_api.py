"""Azure resource access used by the teardown operations.

Wraps the azure-mgmt SDK clients behind one small API per resource kind. Each
API is bound to a resource group and offers get() and/or delete():

- get() returns a model snapshot, or None when the resource does not exist
- delete() returns a DeletionJob; a resource that is already gone yields Done
- PublicIPAddressApi.delete() blocks until the operation finishes and returns
  a bool

Reads retry transient failures with exponential backoff. Other provider errors
(azure.core.exceptions) propagate to the caller.

Public API:
    AzureComputeApi: Entry point, one accessor per resource kind
    AzureApiError: Raised when clients cannot be created
    create_credential: Build an azure-identity credential from config
"""

import logging
from typing import Any, Callable

from azure.core.exceptions import ResourceNotFoundError
from azure.identity import AzureCliCredential, DefaultAzureCredential
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient

from azteardown.config import TeardownConfig
from azteardown.deletion import DeletionJob, Done, Pending, ResourceDeleted
from azteardown.models import (
    AvailabilitySet,
    NetworkInterfaceCard,
    NetworkSecurityGroup,
    VirtualMachine,
)
from azteardown.retry_handler import retry_with_exponential_backoff

logger = logging.getLogger(__name__)

__all__ = [
    "AvailabilitySetApi",
    "AzureApiError",
    "AzureComputeApi",
    "DiskApi",
    "NetworkInterfaceCardApi",
    "NetworkSecurityGroupApi",
    "PublicIPAddressApi",
    "ResourceGroupApi",
    "VirtualMachineApi",
    "create_credential",
]


class AzureApiError(Exception):
    """Raised when Azure clients cannot be created."""

    pass


def create_credential(config: TeardownConfig) -> Any:
    """Create the azure-identity credential selected by config.

    Args:
        config: Teardown configuration

    Returns:
        DefaultAzureCredential or AzureCliCredential
    """
    if config.credential == "cli":
        return AzureCliCredential()
    return DefaultAzureCredential()


class _ResourceApi:
    """Shared plumbing for resource-group scoped APIs."""

    def __init__(
        self,
        resource_group: str,
        retry: Callable[[Callable[..., Any]], Callable[..., Any]],
        polling_interval: float,
    ) -> None:
        self.resource_group = resource_group
        self._retry = retry
        self._polling_interval = polling_interval

    def _get(self, operation: Callable[..., Any], name: str) -> Any:
        try:
            return self._retry(operation)(self.resource_group, name)
        except ResourceNotFoundError:
            return None

    def _begin_delete(self, operation: Callable[..., Any], kind: str, name: str) -> DeletionJob:
        description = f"deletion of {kind} {name} in {self.resource_group}"
        try:
            poller = operation(
                self.resource_group, name, polling_interval=self._polling_interval
            )
        except ResourceNotFoundError:
            logger.debug(f"{kind} {name} already deleted")
            return Done(description)
        if poller is None:
            return Done(description)
        return Pending(poller, description)


class VirtualMachineApi(_ResourceApi):
    def __init__(self, client: ComputeManagementClient, resource_group: str, **kwargs: Any):
        super().__init__(resource_group, **kwargs)
        self._client = client

    def get(self, name: str) -> VirtualMachine | None:
        vm = self._get(self._client.virtual_machines.get, name)
        if vm is None:
            return None
        return VirtualMachine.from_sdk(vm, self.resource_group)

    def delete(self, name: str) -> DeletionJob:
        return self._begin_delete(self._client.virtual_machines.begin_delete, "VM", name)


class NetworkInterfaceCardApi(_ResourceApi):
    def __init__(self, client: NetworkManagementClient, resource_group: str, **kwargs: Any):
        super().__init__(resource_group, **kwargs)
        self._client = client

    def get(self, name: str) -> NetworkInterfaceCard | None:
        nic = self._get(self._client.network_interfaces.get, name)
        if nic is None:
            return None
        return NetworkInterfaceCard.from_sdk(nic)

    def delete(self, name: str) -> DeletionJob:
        return self._begin_delete(self._client.network_interfaces.begin_delete, "NIC", name)


class PublicIPAddressApi(_ResourceApi):
    def __init__(
        self,
        client: NetworkManagementClient,
        resource_group: str,
        resource_deleted: ResourceDeleted,
        **kwargs: Any,
    ):
        super().__init__(resource_group, **kwargs)
        self._client = client
        self._resource_deleted = resource_deleted

    def delete(self, name: str) -> bool:
        """Delete a public IP and wait for the operation.

        Returns:
            True if the public IP is gone
        """
        job = self._begin_delete(self._client.public_ip_addresses.begin_delete, "public IP", name)
        return self._resource_deleted(job)


class DiskApi(_ResourceApi):
    def __init__(self, client: ComputeManagementClient, resource_group: str, **kwargs: Any):
        super().__init__(resource_group, **kwargs)
        self._client = client

    def delete(self, name: str) -> DeletionJob:
        return self._begin_delete(self._client.disks.begin_delete, "disk", name)


class AvailabilitySetApi(_ResourceApi):
    def __init__(self, client: ComputeManagementClient, resource_group: str, **kwargs: Any):
        super().__init__(resource_group, **kwargs)
        self._client = client

    def get(self, name: str) -> AvailabilitySet | None:
        availability_set = self._get(self._client.availability_sets.get, name)
        if availability_set is None:
            return None
        return AvailabilitySet.from_sdk(availability_set)

    def delete(self, name: str) -> DeletionJob:
        # Availability set deletion is synchronous in the compute API
        try:
            self._client.availability_sets.delete(self.resource_group, name)
        except ResourceNotFoundError:
            logger.debug(f"availability set {name} already deleted")
        return Done(f"deletion of availability set {name} in {self.resource_group}")


class NetworkSecurityGroupApi(_ResourceApi):
    def __init__(self, client: NetworkManagementClient, resource_group: str, **kwargs: Any):
        super().__init__(resource_group, **kwargs)
        self._client = client

    def get(self, name: str) -> NetworkSecurityGroup | None:
        security_group = self._get(self._client.network_security_groups.get, name)
        if security_group is None:
            return None
        return NetworkSecurityGroup.from_sdk(security_group)

    def delete(self, name: str) -> DeletionJob:
        return self._begin_delete(
            self._client.network_security_groups.begin_delete, "security group", name
        )


class ResourceGroupApi:
    def __init__(
        self,
        client: ResourceManagementClient,
        retry: Callable[[Callable[..., Any]], Callable[..., Any]],
        polling_interval: float,
    ):
        self._client = client
        self._retry = retry
        self._polling_interval = polling_interval

    def resources(self, group: str) -> list[str]:
        """List ids of the resources currently in a resource group.

        A group that does not exist has no resources.
        """

        def list_ids(name: str) -> list[str]:
            return [resource.id for resource in self._client.resources.list_by_resource_group(name)]

        try:
            return self._retry(list_ids)(group)
        except ResourceNotFoundError:
            return []

    def delete(self, group: str) -> DeletionJob:
        description = f"deletion of resource group {group}"
        try:
            poller = self._client.resource_groups.begin_delete(
                group, polling_interval=self._polling_interval
            )
        except ResourceNotFoundError:
            logger.debug(f"resource group {group} already deleted")
            return Done(description)
        return Pending(poller, description)


class AzureComputeApi:
    """Access to every resource kind touched by a teardown.

    Args:
        compute_client: azure.mgmt.compute client
        network_client: azure.mgmt.network client
        resource_client: azure.mgmt.resource client
        config: Teardown configuration (timeouts, polling, retries)
    """

    def __init__(
        self,
        compute_client: ComputeManagementClient,
        network_client: NetworkManagementClient,
        resource_client: ResourceManagementClient,
        config: TeardownConfig | None = None,
    ) -> None:
        self.config = config or TeardownConfig()
        self.compute_client = compute_client
        self.network_client = network_client
        self.resource_client = resource_client
        self._retry = retry_with_exponential_backoff(
            max_attempts=self.config.retry_max_attempts,
            initial_delay=self.config.retry_initial_delay,
            max_delay=self.config.retry_max_delay,
        )
        self._resource_deleted = ResourceDeleted(timeout=self.config.deletion_timeout)

    @classmethod
    def from_config(
        cls, config: TeardownConfig, credential: Any = None, **client_options: Any
    ) -> "AzureComputeApi":
        """Create SDK clients for the configured subscription.

        Args:
            config: Teardown configuration
            credential: azure-identity credential (default: from config)
            **client_options: Extra azure-core pipeline options (e.g. transport)

        Raises:
            AzureApiError: If no subscription is configured or clients fail to build
        """
        if not config.subscription_id:
            raise AzureApiError(
                "No subscription configured. Set AZURE_SUBSCRIPTION_ID or "
                "subscription_id in the config file."
            )

        # Reads are retried by retry_handler only; the SDK pipeline sends each request once
        options = {"retry_total": 0, **client_options}

        try:
            credential = credential or create_credential(config)
            return cls(
                ComputeManagementClient(credential, config.subscription_id, **options),
                NetworkManagementClient(credential, config.subscription_id, **options),
                ResourceManagementClient(credential, config.subscription_id, **options),
                config,
            )
        except Exception as e:
            raise AzureApiError(f"Failed to create Azure clients: {e}") from e

    def _scoped(self) -> dict[str, Any]:
        return {"retry": self._retry, "polling_interval": self.config.polling_interval}

    def virtual_machines(self, resource_group: str) -> VirtualMachineApi:
        return VirtualMachineApi(self.compute_client, resource_group, **self._scoped())

    def network_interfaces(self, resource_group: str) -> NetworkInterfaceCardApi:
        return NetworkInterfaceCardApi(self.network_client, resource_group, **self._scoped())

    def public_ip_addresses(self, resource_group: str) -> PublicIPAddressApi:
        return PublicIPAddressApi(
            self.network_client,
            resource_group,
            resource_deleted=self._resource_deleted,
            **self._scoped(),
        )

    def disks(self, resource_group: str) -> DiskApi:
        return DiskApi(self.compute_client, resource_group, **self._scoped())

    def availability_sets(self, resource_group: str) -> AvailabilitySetApi:
        return AvailabilitySetApi(self.compute_client, resource_group, **self._scoped())

    def network_security_groups(self, resource_group: str) -> NetworkSecurityGroupApi:
        return NetworkSecurityGroupApi(self.network_client, resource_group, **self._scoped())

    def resource_groups(self) -> ResourceGroupApi:
        return ResourceGroupApi(self.resource_client, self._retry, self.config.polling_interval)

    @property
    def resource_deleted(self) -> ResourceDeleted:
        """Confirmation predicate configured with the deletion timeout."""
        return self._resource_deleted
