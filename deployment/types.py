import click
from ape.utils import ZERO_ADDRESS
from eth_utils import is_address, to_checksum_address


class MinInt(click.ParamType):
    """An integer option with a lower bound, e.g. a number of block confirmations."""

    name = "minint"

    def __init__(self, min_value: int):
        self.min_value = min_value

    def convert(self, value, param, ctx):
        try:
            number = int(value)
        except (TypeError, ValueError):
            self.fail(f"{value} is not a valid integer", param, ctx)

        if number < self.min_value:
            self.fail(
                f"{value} is less than the minimum allowed value of {self.min_value}", param, ctx
            )
        return number


class ChecksumAddress(click.ParamType):
    """A non-zero contract or account address, returned in EIP-55 form."""

    name = "checksum_address"

    def convert(self, value, param, ctx):
        if not is_address(value):
            self.fail(f"{value} is not a valid ethereum address", param, ctx)
        address = to_checksum_address(value)
        if address == ZERO_ADDRESS:
            self.fail("the zero address is not a deployed contract", param, ctx)
        return address
