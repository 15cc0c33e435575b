CHAIN_ID_ETHEREUM = 1
CHAIN_ID_ROPSTEN = 3
CHAIN_ID_RINKEBY = 4
CHAIN_ID_BSC = 56
CHAIN_ID_POLYGON = 137
CHAIN_ID_MOONBEAM_ALPHA = 1287
CHAIN_ID_DEVELOPMENT = 8996
CHAIN_ID_MUMBAI = 80001

CHAIN_CODE_TO_ID = {
    "mainnet": CHAIN_ID_ETHEREUM,
    "ethereum": CHAIN_ID_ETHEREUM,
    "ropsten": CHAIN_ID_ROPSTEN,
    "rinkeby": CHAIN_ID_RINKEBY,
    "bsc": CHAIN_ID_BSC,
    "polygon": CHAIN_ID_POLYGON,
    "moonbeamalpha": CHAIN_ID_MOONBEAM_ALPHA,
    "development": CHAIN_ID_DEVELOPMENT,
    "mumbai": CHAIN_ID_MUMBAI,
}

CHAIN_ID_TO_CODE: dict[int, str] = {
    v: k for k, v in CHAIN_CODE_TO_ID.items() if k != "ethereum"
}

SUPPORTED_CHAINS = [
    CHAIN_ID_ETHEREUM,
    CHAIN_ID_ROPSTEN,
    CHAIN_ID_RINKEBY,
    CHAIN_ID_BSC,
    CHAIN_ID_POLYGON,
    CHAIN_ID_MOONBEAM_ALPHA,
    CHAIN_ID_DEVELOPMENT,
    CHAIN_ID_MUMBAI,
]

POA_MIDDLEWARE_CHAIN_IDS: set[int] = {
    CHAIN_ID_RINKEBY,
    CHAIN_ID_BSC,
    CHAIN_ID_POLYGON,
    CHAIN_ID_MUMBAI,
}

PRE_EIP_1559_CHAIN_IDS: set[int] = {
    CHAIN_ID_BSC,
    CHAIN_ID_MOONBEAM_ALPHA,
    CHAIN_ID_DEVELOPMENT,
}

CHAIN_EXPLORER_URLS: dict[int, str] = {
    CHAIN_ID_ETHEREUM: "https://etherscan.io/",
    CHAIN_ID_ROPSTEN: "https://ropsten.etherscan.io/",
    CHAIN_ID_RINKEBY: "https://rinkeby.etherscan.io/",
    CHAIN_ID_BSC: "https://bscscan.com/",
    CHAIN_ID_POLYGON: "https://polygonscan.com/",
    CHAIN_ID_MOONBEAM_ALPHA: "https://moonbase-blockscout.testnet.moonbeam.network/",
    CHAIN_ID_MUMBAI: "https://mumbai.polygonscan.com/",
}
