ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

GAS_LIMIT_DEFAULT = 1_000_000
# Added on top of the estimate (or the default) before submission.
GAS_HEADROOM_UNITS = 1
GAS_BUFFER_MULTIPLIER = 1.0
SUGGESTED_PRIORITY_FEE_MULTIPLIER = 1.5
SUGGESTED_GAS_PRICE_MULTIPLIER = 1.5
MAX_BASE_FEE_GROWTH_MULTIPLIER = 2

FIXED_POINT_DECIMALS = 18
MAX_UINT256 = 2**256 - 1

# Timeout constants (seconds)
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_TRANSACTION_TIMEOUT = 180
DEFAULT_RECEIPT_POLL_INTERVAL = 0.1
DEFAULT_CONFIRMATIONS = 1


DEFAULT_NFT_TEMPLATE_INDEX = 1
DEFAULT_DATATOKEN_TEMPLATE_INDEX = 1
DEFAULT_DATATOKEN_CAP = "1000"
DEFAULT_NFT_TOKEN_ID = 1

ADAPTER_NFT = "NFT"
ADAPTER_DATATOKEN = "DATATOKEN"
ADAPTER_NFT_FACTORY = "NFT_FACTORY"
ADAPTER_ERC20_FACTORY = "ERC20_FACTORY"
ADAPTER_POOL = "POOL"
