#!/usr/bin/env python3
"""
Tests for the migration runner entry point
"""

from unittest.mock import MagicMock, patch

import pytest

from migrations import runner
from migrations.directive import DEPLOYMENT_ORDER
from migrations.errors import ArtifactNotFound, NetworkUnavailable, TransactionFailure

ENV_VARS = ["NETWORK", "RPC_URL", "TEST_RPC_URL", "CHAIN_ID", "PRIVATE_KEY", "SLACK_WEBHOOK"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestParseArgs:
    """Test class for command-line parsing"""

    def test_defaults(self):
        args = runner.parse_args([])
        assert args.network is None
        assert args.build_dirs is None
        assert args.records_dir is None
        assert args.env_file == ".env"
        assert args.log_file == "migrations.log"

    def test_repeatable_build_dir(self):
        args = runner.parse_args(["sepolia", "--build-dir", "a", "--build-dir", "b"])
        assert args.network == "sepolia"
        assert args.build_dirs == ["a", "b"]


class TestMain:
    """Test class for runner.main"""

    def setup_method(self):
        self.deployer = MagicMock()
        self.deployer.accounts.return_value = ["0xAAA"]
        self.deployer.deployed = []
        self.deployer.summary.return_value = []
        self.deployer.record.path = "deployments/test.json"

    def run_main(self, tmp_path, *extra):
        argv = ["test", "--env-file", str(tmp_path / "missing.env"), "--records-dir", str(tmp_path)] + list(extra)
        with patch.object(runner, "configure_logging"), \
                patch.object(runner, "Web3Deployer", return_value=self.deployer) as deployer_cls, \
                patch.object(runner, "send_alert") as alert:
            code = runner.main(argv)
        return code, deployer_cls, alert

    def test_success(self, tmp_path):
        """Test that all four contracts are deployed and exit code is 0"""
        code, deployer_cls, alert = self.run_main(tmp_path)

        assert code == 0
        context = deployer_cls.call_args[0][0]
        assert context.network == "test"
        assert context.records_dir == str(tmp_path)
        self.deployer.connect.assert_called_once()
        assert [c[0][0] for c in self.deployer.deploy.call_args_list] == list(DEPLOYMENT_ORDER)
        alert.assert_not_called()

    def test_build_dirs_forwarded(self, tmp_path):
        code, deployer_cls, _ = self.run_main(tmp_path, "--build-dir", "out/contracts")
        store = deployer_cls.call_args[0][1]
        assert [str(d) for d in store.build_dirs] == ["out/contracts"]

    def test_deployment_failure(self, tmp_path, monkeypatch):
        """Test that a failure stops the run, alerts and exits with 1"""
        monkeypatch.setenv("SLACK_WEBHOOK", "https://hooks.slack.test/x")
        self.deployer.deploy.side_effect = [None, TransactionFailure("reverted")]
        self.deployer.deployed = ["first"]

        code, _, alert = self.run_main(tmp_path)

        assert code == 1
        assert self.deployer.deploy.call_count == 2
        alert.assert_called_once()
        message, network, webhook, deployed = alert.call_args[0]
        assert "reverted" in message
        assert network == "test"
        assert webhook == "https://hooks.slack.test/x"
        assert deployed == ["first"]

    def test_connection_failure(self, tmp_path):
        self.deployer.connect.side_effect = NetworkUnavailable("no node")
        code, _, alert = self.run_main(tmp_path)
        assert code == 1
        self.deployer.deploy.assert_not_called()
        alert.assert_called_once()

    def test_accounts_failure(self, tmp_path):
        self.deployer.accounts.side_effect = NetworkUnavailable("refused")
        code, _, alert = self.run_main(tmp_path)
        assert code == 1
        self.deployer.deploy.assert_not_called()
        alert.assert_called_once()

    def test_missing_artifact(self, tmp_path):
        self.deployer.deploy.side_effect = ArtifactNotFound("WJ")
        code, _, _ = self.run_main(tmp_path)
        assert code == 1
        assert self.deployer.deploy.call_count == 1

    def test_bad_configuration(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CHAIN_ID", "not-a-number")
        code, deployer_cls, alert = self.run_main(tmp_path)
        assert code == 1
        deployer_cls.assert_not_called()
        assert alert.call_args[0][3] == []

    def test_unexpected_error_propagates(self, tmp_path):
        self.deployer.deploy.side_effect = RuntimeError("bug")
        with pytest.raises(RuntimeError):
            self.run_main(tmp_path)
