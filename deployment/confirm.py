from collections import OrderedDict

from ape.utils import ZERO_ADDRESS

ABORT_ANSWERS = ("n", "no")


def _abort_unless_confirmed(question: str) -> None:
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() in ABORT_ANSWERS:
        print("Aborting deployment!")
        exit(-1)


def confirm_continue() -> None:
    """Asks the user to continue."""
    _abort_unless_confirmed("Continue")


def confirm_arguments(contract_name: str, arguments: OrderedDict) -> None:
    """Shows the constructor arguments of a contract and asks the user to deploy it."""
    if not arguments:
        print(f"\n(i) No constructor parameters for {contract_name}")
    else:
        print(f"\nConstructor parameters for {contract_name}")
        for name, value in arguments.items():
            print(f"\t{name}={value}")

    _abort_unless_confirmed(f"Deploy {contract_name}")

    zero_address_params = [name for name, value in arguments.items() if value == ZERO_ADDRESS]
    if zero_address_params:
        _abort_unless_confirmed(
            f"Zero address given for {', '.join(zero_address_params)}; continue?"
        )
