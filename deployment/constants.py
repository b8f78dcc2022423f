from pathlib import Path

import deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
GAME_PARAMS_FILENAME = "game.yml"

#
# Networks
#

LOCAL_BLOCKCHAIN_ENVIRONMENTS = ["local"]
RINKEBY = "rinkeby"
RINKEBY_CHAIN_ID = 4

#
# Environment
#

RPC_URL_ENVVAR_SUFFIX = "_URL"
PRIVATE_KEY_ENVVAR_SUFFIX = "_PRIVATE_KEY"
ETHERSCAN_API_KEY_ENVVAR = "ETHERSCAN_API_KEY"
DEPLOYER_PASSPHRASE_ENVVAR = "DEPLOYER_PASSPHRASE"
DEPLOYER_ALIAS_SUFFIX = "-deployer"

#
# Contracts
#

GUESSING_GAME = "GuessingGame"
GUESS_TOKEN = "GuessToken"
LOCK = "Lock"

# read-only method on GuessingGame returning the GuessToken address
TOKEN_GETTER = "token"

ONE_YEAR_IN_SECONDS = 365 * 24 * 60 * 60
LOCKED_AMOUNT = "1 ether"
