from collections import OrderedDict
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from deployment.config import DeploymentConfig
from deployment.constants import GUESS_TOKEN, GUESSING_GAME, RINKEBY, RINKEBY_CHAIN_ID
from deployment.params import ConstructorParameters, GameArguments

# Common constants
COMMISSIONER = "0x44579397d2866716aB34B1e2f77fce964c8616C5"
GAME_ADDRESS = "0x1111111111111111111111111111111111111111"
TOKEN_ADDRESS = "0x2222222222222222222222222222222222222222"
DEPLOYER_ADDRESS = "0x3333333333333333333333333333333333333333"
TEN_MINUTES = 10 * 60

GAME_ABI_INPUTS = [
    ("commissioner", "address"),
    ("initialAsker", "address"),
    ("clueInterval", "uint256"),
    ("expirationIntervalAfterFinalClue", "uint256"),
    ("nextAskerTimeoutInterval", "uint256"),
]
TOKEN_ABI_INPUTS = [("_game", "address")]


# Utility functions
def make_container(name, abi_inputs):
    """A stand-in for an ape ContractContainer with the given constructor inputs."""
    container = MagicMock(name=name)
    container.contract_type.name = name
    container.constructor.abi.inputs = [
        SimpleNamespace(name=input_name, type=input_type) for input_name, input_type in abi_inputs
    ]
    return container


def make_instance(name, address, tx_hash="0xabc", block_number=1, sender=DEPLOYER_ADDRESS):
    instance = MagicMock(name=f"{name}@{address}")
    instance.contract_type.name = name
    instance.address = address
    instance.receipt.txn_hash = tx_hash
    instance.receipt.block_number = block_number
    instance.receipt.transaction.sender = sender
    return instance


def game_config(**constructor):
    values = OrderedDict(
        commissioner="$COMMISSIONER",
        initialAsker="$COMMISSIONER",
        clueInterval="$TEN_MINUTES",
        expirationIntervalAfterFinalClue="$TEN_MINUTES",
        nextAskerTimeoutInterval="$TEN_MINUTES",
    )
    values.update(constructor)
    return {
        "deployment": {"name": "test", "chain_id": RINKEBY_CHAIN_ID},
        "constants": {"COMMISSIONER": COMMISSIONER, "TEN_MINUTES": TEN_MINUTES},
        "contracts": [{GUESSING_GAME: {"constructor": dict(values)}}],
    }


# Fixtures
@pytest.fixture
def game_arguments():
    return GameArguments(COMMISSIONER, COMMISSIONER, TEN_MINUTES, TEN_MINUTES, TEN_MINUTES)


@pytest.fixture
def parameters():
    return ConstructorParameters.from_config(game_config())


@pytest.fixture
def game_container():
    return make_container(GUESSING_GAME, GAME_ABI_INPUTS)


@pytest.fixture
def token_container():
    return make_container(GUESS_TOKEN, TOKEN_ABI_INPUTS)


@pytest.fixture
def local_config():
    return DeploymentConfig(
        network="local",
        chain_id=1337,
        rpc_url=None,
        private_key=None,
        explorer_api_key=None,
    )


@pytest.fixture
def live_config():
    return DeploymentConfig(
        network=RINKEBY,
        chain_id=RINKEBY_CHAIN_ID,
        rpc_url="https://rinkeby.example",
        private_key="0x" + "01" * 32,
        explorer_api_key="key",
    )


@pytest.fixture
def deployer_account():
    account = MagicMock(name="deployer")
    account.address = DEPLOYER_ADDRESS
    account.balance = 10**18
    account.deploy.side_effect = lambda container, *args, **kwargs: make_instance(
        container.contract_type.name, GAME_ADDRESS
    )
    return account


@pytest.fixture
def answer_yes(monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt: "y")
