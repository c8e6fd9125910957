"""Wire shape of the RAMM Move package: module, entry points and capability type names.

The deployment depends on these staying stable in the published contract.
"""

RAMM_MODULE = "ramm"

NEW_RAMM = "new_ramm"
ADD_ASSET_TO_RAMM = "add_asset_to_ramm"
INITIALIZE_RAMM = "initialize_ramm"

ADMIN_CAP_TYPE = "RAMMAdminCap"
NEW_ASSET_CAP_TYPE = "RAMMNewAssetCap"

# Gas budgets in MIST (10^9 MIST = 1 SUI). Publishing cost roughly 0.25 SUI on testnet.
PACKAGE_PUBLICATION_GAS_BUDGET = 500_000_000
CREATE_RAMM_GAS_BUDGET = 100_000_000
RAMM_PTB_GAS_BUDGET = 100_000_000
