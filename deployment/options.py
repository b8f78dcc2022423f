import click

from deployment.types import ChecksumAddress, MinInt

contract_option = click.option(
    "--contract",
    "-c",
    "contract_address",
    help="Address of the deployed GuessingGame contract",
    type=ChecksumAddress(),
    required=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)

confirmations_option = click.option(
    "--confirmations",
    help="Number of block confirmations to wait for after mining.",
    type=MinInt(0),
    default=None,
)

keep_going_option = click.option(
    "--keep-going",
    help="Verify the token even if verifying the game contract failed.",
    is_flag=True,
    default=False,
)

skip_argument_check_option = click.option(
    "--skip-argument-check",
    help="Do not compare constructor arguments with the creation transaction.",
    is_flag=True,
    default=False,
)
