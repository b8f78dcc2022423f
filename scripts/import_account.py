#!/usr/bin/python3

import os

import click
from ape.cli import ConnectedProviderCommand, network_option
from ape_accounts import import_account_from_private_key

from deployment.config import DeploymentConfig, DeploymentConfigError
from deployment.constants import DEPLOYER_ALIAS_SUFFIX, DEPLOYER_PASSPHRASE_ENVVAR


@click.command(cls=ConnectedProviderCommand, name="import-account")
@network_option(required=True)
def cli(network):
    """Import the network's deployer private key into the ape keystore."""
    config = DeploymentConfig.from_environment(
        network=network.name,
        chain_id=network.chain_id,
        require_private_key=True,
    )
    if config.is_local:
        raise click.UsageError("Local networks use ape test accounts; nothing to import.")

    passphrase = os.environ.get(DEPLOYER_PASSPHRASE_ENVVAR)
    if not passphrase:
        raise DeploymentConfigError(f"{DEPLOYER_PASSPHRASE_ENVVAR} is not set.")

    alias = f"{config.network}{DEPLOYER_ALIAS_SUFFIX}"
    account = import_account_from_private_key(alias, passphrase, config.private_key)
    print(f"Account imported as '{alias}': {account.address}")


if __name__ == "__main__":
    cli()
