"""Unit tests for loading deployment configs from TOML."""

import tempfile
import unittest
from pathlib import Path

from deployment_config.display import format_request
from deployment_config.loader import load_request, parse_package_source, request_from_dict
from deployment_config.models import PackagePath, PublishedPackage
from deployment_config.validator import ConfigurationError

_CONFIG = """
target_env = "testnet"
ramm_pkg_addr_or_path = "./ramm-pkg"
asset_count = 2
fee_collection_address = "0xFEE"

[[assets]]
asset_type = "0xA::usdc::USDC"
aggregator_address = "0xA61"
minimum_trade_amount = 1000
decimal_places = 6

[[assets]]
asset_type = "0xA::eth::ETH"
aggregator_address = "0xA62"
minimum_trade_amount = 1
decimal_places = 8
"""


def _raw(**overrides):
    data = {
        "target_env": "mainnet",
        "ramm_pkg_addr_or_path": "0xBEEF",
        "asset_count": 1,
        "fee_collection_address": "0xFEE",
        "assets": [
            {
                "asset_type": "0x2::sui::SUI",
                "aggregator_address": "0xA61",
                "minimum_trade_amount": 10,
                "decimal_places": 9,
            }
        ],
    }
    data.update(overrides)
    return data


class LoaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)

    def _write(self, text: str) -> Path:
        path = self.root / "ramm.toml"
        path.write_text(text)
        return path

    def test_load_request_from_toml(self) -> None:
        request = load_request(self._write(_CONFIG))
        self.assertEqual(request.target_env, "testnet")
        self.assertEqual(request.package_source, PackagePath(Path("./ramm-pkg")))
        self.assertEqual(request.fee_collection_address, "0xFEE")
        self.assertEqual(request.asset_count, 2)
        self.assertEqual([asset.asset_type for asset in request.assets], ["0xA::usdc::USDC", "0xA::eth::ETH"])
        self.assertEqual(request.assets[1].minimum_trade_amount, 1)
        self.assertEqual(request.assets[1].decimal_places, 8)

    def test_hex_package_source_is_a_published_package(self) -> None:
        self.assertEqual(parse_package_source("0xBEEF"), PublishedPackage("0xBEEF"))
        self.assertEqual(parse_package_source(" 0xbeef "), PublishedPackage("0xbeef"))
        self.assertEqual(parse_package_source("../ramm-sui"), PackagePath(Path("../ramm-sui")))
        self.assertEqual(parse_package_source("0xnotanaddress"), PackagePath(Path("0xnotanaddress")))

    def test_missing_file_is_a_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_request(self.root / "missing.toml")

    def test_malformed_toml_is_a_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_request(self._write("target_env = \n"))

    def test_missing_field_is_reported(self) -> None:
        data = _raw()
        del data["fee_collection_address"]
        with self.assertRaises(ConfigurationError) as ctx:
            request_from_dict(data)
        self.assertTrue(any("fee_collection_address" in v for v in ctx.exception.violations))

    def test_out_of_range_values_are_rejected(self) -> None:
        for field, value in (("minimum_trade_amount", 2**64), ("decimal_places", 256), ("decimal_places", -1)):
            asset = dict(_raw()["assets"][0])
            asset[field] = value
            with self.assertRaises(ConfigurationError, msg=field):
                request_from_dict(_raw(assets=[asset]))

    def test_malformed_asset_type_is_rejected(self) -> None:
        for asset_type in ("usdc", "0xA::usdc", "A::usdc::USDC", "0xA::::USDC"):
            asset = dict(_raw()["assets"][0], asset_type=asset_type)
            with self.assertRaises(ConfigurationError, msg=asset_type):
                request_from_dict(_raw(assets=[asset]))

    def test_generic_asset_type_is_accepted(self) -> None:
        asset = dict(_raw()["assets"][0], asset_type="0x2::coin::Coin<0x2::sui::SUI>")
        request = request_from_dict(_raw(assets=[asset]))
        self.assertEqual(request.assets[0].asset_type, "0x2::coin::Coin<0x2::sui::SUI>")

    def test_unknown_keys_are_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            request_from_dict(_raw(network="testnet"))

    def test_loader_does_not_apply_domain_rules(self) -> None:
        request = request_from_dict(_raw(target_env="devnet", asset_count=4))
        self.assertEqual(request.target_env, "devnet")
        self.assertEqual(request.asset_count, 4)


class DisplayTests(unittest.TestCase):
    def test_format_request_lists_every_asset_and_the_package_source(self) -> None:
        request = request_from_dict(_raw())
        text = format_request(request)
        lines = text.splitlines()
        self.assertEqual(lines[0], "RAMM Deployment Configuration:")
        self.assertEqual(lines[-1], "End of RAMM Deployment Configuration")
        self.assertIn("\tTarget environment: mainnet", lines)
        self.assertIn("\t\t\tasset type: 0x2::sui::SUI", lines)
        self.assertIn("\tRAMM package address: 0xBEEF", lines)

    def test_format_request_names_the_path_to_publish(self) -> None:
        request = request_from_dict(_raw(ramm_pkg_addr_or_path="./ramm-pkg"))
        self.assertIn("publishing library at path: ramm-pkg", format_request(request))


if __name__ == "__main__":
    unittest.main()
