"""Smoke tests for the ramm-deploy CLI against the simulated ledger."""

import json
import logging
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
from pathlib import Path
from unittest import mock

from ramm_cli.cli import EXIT_DECLINED, EXIT_ERROR, EXIT_OK, main

CONFIG = """
target_env = "{target_env}"
ramm_pkg_addr_or_path = "{package}"
asset_count = 2
fee_collection_address = "0xFEE"

[[assets]]
asset_type = "0xA::usdc::USDC"
aggregator_address = "0xA61"
minimum_trade_amount = 1000
decimal_places = {decimals}

[[assets]]
asset_type = "0xA::eth::ETH"
aggregator_address = "0xA62"
minimum_trade_amount = 1
decimal_places = 8
"""


class RammCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.addCleanup(_reset_logging)
        self.root = Path(self._tmp.name)

    def _config(self, target_env="testnet", package="./ramm-pkg", decimals=6) -> str:
        path = self.root / "ramm.toml"
        path.write_text(CONFIG.format(target_env=target_env, package=package, decimals=decimals))
        return str(path)

    def _run(self, args):
        out, err = StringIO(), StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(args)
        return code, out.getvalue(), err.getvalue()

    def test_show_prints_the_configuration(self) -> None:
        code, output, _ = self._run(["show", "--toml", self._config()])
        self.assertEqual(code, EXIT_OK)
        self.assertIn("RAMM Deployment Configuration:", output)
        self.assertIn("Configuration is valid.", output)

    def test_show_reports_violations(self) -> None:
        code, output, _ = self._run(["show", "--toml", self._config(target_env="devnet")])
        self.assertEqual(code, EXIT_ERROR)
        self.assertIn("INVALID", output)

    def test_simulated_deploy_outputs_json(self) -> None:
        code, output, err = self._run(
            ["deploy", "--toml", self._config(), "--simulate", "--yes", "--log-level", "ERROR"]
        )
        self.assertEqual(code, EXIT_OK, err)
        payload = json.loads(output)
        self.assertEqual(payload["network"], "testnet")
        self.assertEqual(payload["status"], "success")
        for key in ("package_id", "ramm_id", "admin_cap_id", "new_asset_cap_id", "digest"):
            self.assertTrue(payload[key], key)
        self.assertIn("End of RAMM Deployment Configuration", err)

    def test_simulated_deploy_with_published_package(self) -> None:
        code, output, err = self._run(
            ["deploy", "--toml", self._config(package="0xBEEF"), "--simulate", "--yes", "--log-level", "ERROR"]
        )
        self.assertEqual(code, EXIT_OK, err)
        self.assertEqual(json.loads(output)["package_id"], "0xBEEF")

    def test_publish_flag_overrides_the_package_source(self) -> None:
        code, output, err = self._run(
            [
                "deploy",
                "--toml",
                self._config(package="0xBEEF"),
                "--publish",
                "./ramm-pkg",
                "--simulate",
                "--yes",
                "--log-level",
                "ERROR",
            ]
        )
        self.assertEqual(code, EXIT_OK, err)
        self.assertNotEqual(json.loads(output)["package_id"], "0xBEEF")

    def test_declined_confirmation_exits_without_deploying(self) -> None:
        with mock.patch("builtins.input", return_value="n"):
            code, output, err = self._run(
                ["deploy", "--toml", self._config(), "--simulate", "--log-level", "ERROR"]
            )
        self.assertEqual(code, EXIT_DECLINED)
        self.assertIn("cancelled", err)
        self.assertEqual(output, "")

    def test_invalid_config_names_the_validate_step(self) -> None:
        code, _, err = self._run(
            ["deploy", "--toml", self._config(decimals=2), "--simulate", "--yes", "--log-level", "ERROR"]
        )
        self.assertEqual(code, EXIT_ERROR)
        self.assertIn("ERROR: step validate failed", err)

    def test_log_file_receives_the_info_trail(self) -> None:
        log_file = self.root / "deploy.log"
        code, _, err = self._run(
            [
                "deploy",
                "--toml",
                self._config(),
                "--simulate",
                "--yes",
                "--log-level",
                "ERROR",
                "--log-file",
                str(log_file),
            ]
        )
        self.assertEqual(code, EXIT_OK, err)
        _reset_logging()
        self.assertIn("deployed and initialized", log_file.read_text())

    def test_unopenable_log_file_falls_back_to_the_terminal(self) -> None:
        log_file = self.root / "missing" / "dir" / "deploy.log"
        code, output, err = self._run(
            [
                "deploy",
                "--toml",
                self._config(),
                "--simulate",
                "--yes",
                "--log-level",
                "WARNING",
                "--log-file",
                str(log_file),
            ]
        )
        self.assertEqual(code, EXIT_OK, err)
        self.assertEqual(json.loads(output)["status"], "success")
        self.assertIn("Could not open log file", err)
        self.assertFalse(log_file.exists())

    def test_missing_config_names_the_load_step(self) -> None:
        code, _, err = self._run(["deploy", "--toml", str(self.root / "absent.toml"), "--yes", "--log-level", "ERROR"])
        self.assertEqual(code, EXIT_ERROR)
        self.assertIn("ERROR: step load failed", err)
        code, _, err = self._run(["show", "--toml", str(self.root / "absent.toml")])
        self.assertEqual(code, EXIT_ERROR)
        self.assertIn("ERROR: step load failed", err)

    def test_client_construction_failure_names_the_build_context_step(self) -> None:
        code, output, err = self._run(
            [
                "deploy",
                "--toml",
                self._config(),
                "--yes",
                "--sui-binary",
                str(self.root / "no-such-sui"),
                "--log-level",
                "ERROR",
            ]
        )
        self.assertEqual(code, EXIT_ERROR)
        self.assertIn("ERROR: step build_context failed (network)", err)
        self.assertEqual(output, "")

    def test_closed_stdin_declines(self) -> None:
        with mock.patch("builtins.input", side_effect=EOFError):
            code, output, err = self._run(
                ["deploy", "--toml", self._config(), "--simulate", "--log-level", "ERROR"]
            )
        self.assertEqual(code, EXIT_DECLINED)
        self.assertIn("cancelled", err)
        self.assertEqual(output, "")

    def test_unknown_log_level_is_an_error(self) -> None:
        code, _, err = self._run(["deploy", "--toml", self._config(), "--log-level", "LOUD"])
        self.assertEqual(code, EXIT_ERROR)
        self.assertIn("Unknown log level", err)


def _reset_logging() -> None:
    for name in ("deployment_config", "ledger_client", "ramm_deployer", "ramm_cli"):
        package_logger = logging.getLogger(name)
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()
        package_logger.setLevel(logging.NOTSET)
        package_logger.propagate = True


if __name__ == "__main__":
    unittest.main()
