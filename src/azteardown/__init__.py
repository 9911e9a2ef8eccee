"""azteardown - delete Azure VMs together with the resources they own

Deleting a VM on Azure leaves its NICs, public IPs, managed disks and
availability set behind. azteardown removes them in dependency order,
waits for each asynchronous deletion, and keeps going when one of them fails.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
