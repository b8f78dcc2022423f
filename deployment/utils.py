from pathlib import Path

import yaml
from ape import project
from ape.contracts import ContractContainer

from deployment.config import DeploymentConfig, DeploymentConfigError
from deployment.constants import (
    CONSTRUCTOR_PARAMS_DIR,
    ETHERSCAN_API_KEY_ENVVAR,
    GAME_PARAMS_FILENAME,
)


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def game_params_filepath(network_name: str) -> Path:
    """Returns the constructor parameters file for a network."""
    p = CONSTRUCTOR_PARAMS_DIR / network_name / GAME_PARAMS_FILENAME
    if not p.exists():
        raise ValueError(f"No constructor parameters found for network '{network_name}' at {p}")
    return p


def check_etherscan_plugin(config: DeploymentConfig) -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the explorer API key is available.
    """
    if config.is_local:
        # unnecessary for local deployment
        return
    try:
        import ape_etherscan  # noqa: F401
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to use this script.")
    if not config.explorer_api_key:
        raise DeploymentConfigError(f"{ETHERSCAN_API_KEY_ENVVAR} is not set.")


def check_plugins(config: DeploymentConfig) -> None:
    print("Checking plugins...")
    check_etherscan_plugin(config)


def get_contract_container(contract: str) -> ContractContainer:
    try:
        return getattr(project, contract)
    except AttributeError:
        raise ValueError(f"No contract found with name '{contract}'.")
