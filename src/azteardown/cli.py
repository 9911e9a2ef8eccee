"""CLI entry point for azteardown.

Commands:
    azteardown node <rg>/<vm>              # Delete a VM and the resources it owns
    azteardown security-group <rg> <group> # Delete a group's security group if unused
    azteardown group <rg>                  # Delete a resource group if empty

Exit status is 0 when the operation succeeded and 1 otherwise.
"""

import logging
import sys

import click

from azteardown import __version__
from azteardown.azure_api import AzureApiError
from azteardown.cleanup_resources import CleanupResources
from azteardown.config import ConfigError, ConfigManager
from azteardown.resource_ids import ResourceIdError

logger = logging.getLogger(__name__)


def _cleanup_from_context(ctx: click.Context) -> CleanupResources:
    """Build CleanupResources from the group options, exiting on config errors."""
    try:
        config = ConfigManager.load_config(ctx.obj["config_path"])
        if ctx.obj["subscription"]:
            config.subscription_id = ctx.obj["subscription"]
        return CleanupResources.from_config(config)
    except (ConfigError, AzureApiError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _finish(success: bool, message: str, failure: str) -> None:
    if success:
        click.echo(message)
        return
    click.echo(f"Error: {failure}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", help="Config file path", type=click.Path())
@click.option("--subscription", help="Azure subscription ID", type=str)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, subscription: str | None, verbose: bool):
    """azteardown - delete Azure VMs and the resources they own.

    \b
    CONFIGURATION:
        Config file: ~/.azteardown/config.toml
        Environment: AZURE_SUBSCRIPTION_ID, AZTEARDOWN_*
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(message)s"
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["subscription"] = subscription


@main.command()
@click.argument("node_id", type=str)
@click.option("--report", is_flag=True, help="Show the result of every cleanup step")
@click.pass_context
def node(ctx: click.Context, node_id: str, report: bool):
    """Delete a VM with its NICs, public IPs, disks and orphaned availability set.

    NODE_ID is "<resource-group>/<vm-name>".

    \b
    Examples:
        azteardown node my-rg/my-vm
        azteardown node my-rg/my-vm --report
    """
    cleanup = _cleanup_from_context(ctx)

    try:
        if not report:
            _finish(
                cleanup.cleanup_node(node_id),
                f"Deleted {node_id}",
                f"Could not confirm deletion of {node_id}",
            )
            return

        result = cleanup.cleanup_node_report(node_id)
    except ResourceIdError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)

    if result.already_absent:
        click.echo(f"{node_id} does not exist")
    else:
        click.echo(f"VM:               {'deleted' if result.vm_deleted else 'FAILED'}")
        click.echo(f"NICs/public IPs:  {'deleted' if result.nics_deleted else 'FAILED'}")
        click.echo(f"Managed disks:    {'deleted' if result.disks_deleted else 'FAILED'}")
        click.echo(
            f"Availability set: {'ok' if result.availability_set_deleted else 'FAILED'}"
        )
    if not result.all_succeeded:
        sys.exit(1)


@main.command(name="security-group")
@click.argument("resource_group", type=str)
@click.argument("group", type=str)
@click.pass_context
def security_group(ctx: click.Context, resource_group: str, group: str):
    """Delete the shared security group of GROUP if no NIC uses it."""
    cleanup = _cleanup_from_context(ctx)
    _finish(
        cleanup.cleanup_security_group_if_orphaned(resource_group, group),
        f"Deleted security group of {group} in {resource_group}",
        f"Security group of {group} in {resource_group} was not deleted (missing, in use or failed)",
    )


@main.command()
@click.argument("resource_group", type=str)
@click.pass_context
def group(ctx: click.Context, resource_group: str):
    """Delete RESOURCE_GROUP if it contains no resources."""
    cleanup = _cleanup_from_context(ctx)
    try:
        deleted = cleanup.delete_resource_group_if_empty(resource_group)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)
    _finish(
        deleted,
        f"Deleted resource group {resource_group}",
        f"Resource group {resource_group} was not deleted (not empty or failed)",
    )


if __name__ == "__main__":
    main()
