#!/usr/bin/python3
import time

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from deployment.config import DeploymentConfig
from deployment.constants import LOCK, LOCKED_AMOUNT, ONE_YEAR_IN_SECONDS
from deployment.options import autosign_option
from deployment.params import ConstructorParameters, Deployer
from deployment.utils import get_contract_container


@click.command(cls=ConnectedProviderCommand, name="deploy-lock")
@account_option()
@network_option(required=True)
@autosign_option
def cli(account, network, autosign):
    """Deploy the Lock example with 1 ETH locked for a year."""
    config = DeploymentConfig.from_environment(network=network.name, chain_id=network.chain_id)
    deployer = Deployer(
        config=config,
        parameters=ConstructorParameters.from_config({"contracts": [LOCK]}),
        account=account,
        autosign=autosign,
    )
    unlock_time = round(time.time()) + ONE_YEAR_IN_SECONDS
    lock = deployer.deploy(get_contract_container(LOCK), unlock_time, value=LOCKED_AMOUNT)
    print(f"Lock with 1 ETH deployed to: {lock.address}")


if __name__ == "__main__":
    cli()
