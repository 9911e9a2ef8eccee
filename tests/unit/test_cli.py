"""Tests for the azteardown CLI."""

from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from azteardown.azure_api import AzureApiError
from azteardown.cleanup_resources import NodeCleanupReport
from azteardown.cli import main
from azteardown.resource_ids import ResourceIdError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_cleanup():
    with patch("azteardown.cli.CleanupResources") as mock_cls:
        cleanup = Mock()
        mock_cls.from_config.return_value = cleanup
        yield cleanup


class TestNodeCommand:
    def test_success(self, runner, mock_cleanup):
        mock_cleanup.cleanup_node.return_value = True

        result = runner.invoke(main, ["--subscription", "sub", "node", "rg1/vm1"])

        assert result.exit_code == 0
        assert "Deleted rg1/vm1" in result.output
        mock_cleanup.cleanup_node.assert_called_once_with("rg1/vm1")

    def test_failure_exit_code(self, runner, mock_cleanup):
        mock_cleanup.cleanup_node.return_value = False

        result = runner.invoke(main, ["node", "rg1/vm1"])

        assert result.exit_code == 1

    def test_malformed_identifier(self, runner, mock_cleanup):
        mock_cleanup.cleanup_node.side_effect = ResourceIdError("Invalid identifier 'vm1'")

        result = runner.invoke(main, ["node", "vm1"])

        assert result.exit_code == 1
        assert "Invalid identifier" in result.output

    def test_report(self, runner, mock_cleanup):
        mock_cleanup.cleanup_node_report.return_value = NodeCleanupReport(
            node_id="rg1/vm1",
            vm_deleted=True,
            nics_deleted=True,
            disks_deleted=False,
            availability_set_deleted=True,
        )

        result = runner.invoke(main, ["node", "rg1/vm1", "--report"])

        assert result.exit_code == 1
        assert "Managed disks:    FAILED" in result.output
        assert "VM:               deleted" in result.output

    def test_report_for_missing_vm(self, runner, mock_cleanup):
        mock_cleanup.cleanup_node_report.return_value = NodeCleanupReport(
            node_id="rg1/vm1", already_absent=True, vm_deleted=True
        )

        result = runner.invoke(main, ["node", "rg1/vm1", "--report"])

        assert result.exit_code == 0
        assert "does not exist" in result.output

    def test_provider_error(self, runner, mock_cleanup):
        mock_cleanup.cleanup_node.side_effect = RuntimeError("throttled")

        result = runner.invoke(main, ["node", "rg1/vm1"])

        assert result.exit_code == 1
        assert "Unexpected error: throttled" in result.output


class TestOtherCommands:
    def test_security_group(self, runner, mock_cleanup):
        mock_cleanup.cleanup_security_group_if_orphaned.return_value = True

        result = runner.invoke(main, ["security-group", "rg1", "web"])

        assert result.exit_code == 0
        mock_cleanup.cleanup_security_group_if_orphaned.assert_called_once_with("rg1", "web")

    def test_group_not_empty(self, runner, mock_cleanup):
        mock_cleanup.delete_resource_group_if_empty.return_value = False

        result = runner.invoke(main, ["group", "rg1"])

        assert result.exit_code == 1
        assert "not empty" in result.output


class TestConfiguration:
    def test_subscription_option_overrides_config(self, runner):
        with patch("azteardown.cli.CleanupResources") as mock_cls:
            mock_cls.from_config.return_value.cleanup_node.return_value = True

            runner.invoke(main, ["--subscription", "from-flag", "node", "rg1/vm1"])

        config = mock_cls.from_config.call_args[0][0]
        assert config.subscription_id == "from-flag"

    def test_missing_subscription(self, runner):
        with patch(
            "azteardown.cli.CleanupResources.from_config",
            side_effect=AzureApiError("No subscription configured"),
        ):
            result = runner.invoke(main, ["node", "rg1/vm1"])

        assert result.exit_code == 1
        assert "No subscription configured" in result.output

    def test_bad_config_file(self, runner, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('credential = "password"\n')

        result = runner.invoke(main, ["--config", str(path), "node", "rg1/vm1"])

        assert result.exit_code == 1
        assert "Invalid credential type" in result.output
