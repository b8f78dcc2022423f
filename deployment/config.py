import os
from typing import Mapping, NamedTuple, Optional

from dotenv import find_dotenv, load_dotenv

from deployment.constants import (
    ETHERSCAN_API_KEY_ENVVAR,
    LOCAL_BLOCKCHAIN_ENVIRONMENTS,
    PRIVATE_KEY_ENVVAR_SUFFIX,
    RPC_URL_ENVVAR_SUFFIX,
)


class DeploymentConfigError(ValueError):
    pass


def rpc_url_envvar(network_name: str) -> str:
    return f"{_envvar_prefix(network_name)}{RPC_URL_ENVVAR_SUFFIX}"


def private_key_envvar(network_name: str) -> str:
    return f"{_envvar_prefix(network_name)}{PRIVATE_KEY_ENVVAR_SUFFIX}"


def _envvar_prefix(network_name: str) -> str:
    return network_name.upper().replace("-", "_")


def load_environment() -> bool:
    """
    Loads the project's .env file into the process environment. Variables that
    are already set win. Must run before ape first reads ape-config.yaml, which
    is when its ${VAR} references are substituted.
    """
    return load_dotenv(find_dotenv(usecwd=True))


class DeploymentConfig(NamedTuple):
    """Process-wide settings read once at startup."""

    network: str
    chain_id: int
    rpc_url: Optional[str]
    private_key: Optional[str]
    explorer_api_key: Optional[str]

    @property
    def is_local(self) -> bool:
        return self.network in LOCAL_BLOCKCHAIN_ENVIRONMENTS

    @classmethod
    def from_environment(
        cls,
        network: str,
        chain_id: int,
        require_rpc_url: bool = True,
        require_private_key: bool = False,
        require_explorer_api_key: bool = False,
        environ: Optional[Mapping[str, str]] = None,
        dotenv: bool = True,
    ) -> "DeploymentConfig":
        """
        Reads the network endpoint, signing key and explorer API key from the
        environment (after loading any .env file) and fails fast, naming every
        missing variable. Local networks need none of them.
        """
        if dotenv:
            load_environment()
        environ = os.environ if environ is None else environ

        rpc_url_var = rpc_url_envvar(network)
        private_key_var = private_key_envvar(network)
        config = cls(
            network=network,
            chain_id=int(chain_id),
            rpc_url=environ.get(rpc_url_var) or None,
            private_key=environ.get(private_key_var) or None,
            explorer_api_key=environ.get(ETHERSCAN_API_KEY_ENVVAR) or None,
        )
        if config.is_local:
            return config

        required = []
        if require_rpc_url:
            required.append((rpc_url_var, config.rpc_url))
        if require_private_key:
            required.append((private_key_var, config.private_key))
        if require_explorer_api_key:
            required.append((ETHERSCAN_API_KEY_ENVVAR, config.explorer_api_key))

        missing = [name for name, value in required if value is None]
        if missing:
            raise DeploymentConfigError(
                f"Missing environment variable(s) for network '{network}': {', '.join(missing)}"
            )
        return config

