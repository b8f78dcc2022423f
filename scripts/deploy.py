#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from deployment.config import DeploymentConfig
from deployment.constants import GUESSING_GAME
from deployment.options import autosign_option, confirmations_option
from deployment.params import Deployer
from deployment.utils import game_params_filepath, get_contract_container


@click.command(cls=ConnectedProviderCommand, name="deploy")
@account_option()
@network_option(required=True)
@autosign_option
@confirmations_option
def cli(account, network, autosign, confirmations):
    """Deploy the GuessingGame contract."""
    config = DeploymentConfig.from_environment(network=network.name, chain_id=network.chain_id)
    deployer = Deployer.from_yaml(
        filepath=game_params_filepath(network.name),
        config=config,
        account=account,
        autosign=autosign,
        required_confirmations=confirmations,
    )
    deployer.deploy(get_contract_container(GUESSING_GAME))


if __name__ == "__main__":
    cli()
