#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, network_option

from deployment.config import DeploymentConfig
from deployment.constants import GUESS_TOKEN, GUESSING_GAME
from deployment.options import contract_option, keep_going_option, skip_argument_check_option
from deployment.params import ConstructorParameters
from deployment.utils import check_plugins, game_params_filepath, get_contract_container
from deployment.verification import GameVerifier


@click.command(cls=ConnectedProviderCommand, name="verify-game")
@network_option(required=True)
@contract_option
@keep_going_option
@skip_argument_check_option
def cli(network, contract_address, keep_going, skip_argument_check):
    """Verify a deployed GuessingGame contract and its token."""
    config = DeploymentConfig.from_environment(
        network=network.name,
        chain_id=network.chain_id,
        require_explorer_api_key=True,
    )
    check_plugins(config)

    parameters = ConstructorParameters.from_yaml(game_params_filepath(network.name))
    parameters.validate_chain_id(config)

    verifier = GameVerifier(
        game_container=get_contract_container(GUESSING_GAME),
        token_container=get_contract_container(GUESS_TOKEN),
        arguments=parameters.game_arguments(),
        halt_on_failure=not keep_going,
        check_arguments=not skip_argument_check,
    )

    click.echo(f"Verifying game contract at {contract_address}")
    report = verifier.verify(contract_address)
    click.echo(f"Done: {report}")


if __name__ == "__main__":
    cli()
