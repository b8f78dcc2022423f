from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from ape import chain, networks
from ape.api import ExplorerAPI
from ape.contracts.base import ContractContainer
from ape.logging import logger
from ape.utils import ZERO_ADDRESS, cached_property
from ape_etherscan.verify import SourceVerifier
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from web3.auto import w3

from deployment.constants import TOKEN_GETTER
from deployment.params import GameArguments


class VerificationState(Enum):
    START = "start"
    SUBMITTED_MAIN = "submitted_main"
    FETCHED_TOKEN_ADDR = "fetched_token_addr"
    SUBMITTED_TOKEN = "submitted_token"
    DONE = "done"
    FAILED = "failed"


# step names used in reports
SUBMIT_MAIN = "submit game"
FETCH_TOKEN = "fetch token address"
SUBMIT_TOKEN = "submit token"


class ConstructorArgumentMismatch(Exception):
    """Raised when constructor arguments differ from the ones a contract was created with"""


def encode_constructor_arguments(container: ContractContainer, args: Sequence[Any]) -> bytes:
    """ABI-encodes constructor arguments as they appear at the end of creation calldata."""
    types = [abi_input.type for abi_input in container.constructor.abi.inputs]
    if len(types) != len(args):
        raise ConstructorArgumentMismatch(
            f"{container.contract_type.name} constructor takes {len(types)} argument(s), "
            f"got {len(args)}."
        )
    for abi_type, value in zip(types, args):
        if not w3.is_encodable(abi_type, value):
            raise ConstructorArgumentMismatch(
                f"Value '{value}' is not encodable as constructor ABI type '{abi_type}'."
            )
    return bytes(w3.codec.encode(types, list(args)))


def check_constructor_arguments(
    address: ChecksumAddress, container: ContractContainer, args: Sequence[Any]
) -> None:
    """
    Compares constructor arguments with the tail of the transaction that created the
    contract. Contracts created by another contract are only checked for encodability
    since their creation calldata is not part of any transaction input.
    """
    expected = encode_constructor_arguments(container, args)
    creation = chain.contracts.get_creation_metadata(address)
    if creation is None:
        raise ConstructorArgumentMismatch(f"Unable to find the creation transaction of {address}.")
    if creation.factory is not None:
        print(f"(i) {address} was created by {creation.factory}; skipping calldata comparison.")
        return

    receipt = chain.provider.get_receipt(creation.txn_hash)
    calldata = bytes(receipt.transaction.data)
    if not calldata.endswith(expected):
        raise ConstructorArgumentMismatch(
            f"Constructor arguments for {container.contract_type.name} at {address} do not match "
            f"the ones used in creation transaction {creation.txn_hash}."
        )


class ArgumentSourceVerifier(SourceVerifier):
    """
    Etherscan source verifier that submits known constructor arguments.

    The stock verifier reads the arguments from the first transaction sent to the
    address, which a contract created by another contract does not have.
    """

    def __init__(self, address, client_factory, encoded_arguments: bytes, project=None):
        super().__init__(address, client_factory, project=project)
        self.encoded_arguments = encoded_arguments

    @cached_property
    def constructor_arguments(self) -> str:
        # hex without 0x prefix
        return self.encoded_arguments.hex()


class VerificationReport:
    """Tracks the progress of verifying a game contract and its token."""

    def __init__(self, game_address: ChecksumAddress):
        self.game_address = game_address
        self.token_address: Optional[ChecksumAddress] = None
        self.history: List[VerificationState] = [VerificationState.START]
        self.failures: List[Tuple[str, Exception]] = list()

    @property
    def state(self) -> VerificationState:
        return self.history[-1]

    @property
    def failed_step(self) -> Optional[str]:
        if not self.failures:
            return None
        return self.failures[0][0]

    def advance(self, state: VerificationState) -> None:
        if self.state in (VerificationState.DONE, VerificationState.FAILED):
            raise RuntimeError(f"Cannot leave terminal state {self.state.name}.")
        self.history.append(state)

    def fail(self, step: str, error: Exception) -> None:
        self.failures.append((step, error))

    def __repr__(self) -> str:
        path = " -> ".join(state.name for state in self.history)
        return f"VerificationReport({self.game_address}: {path})"


class GameVerifier:
    """
    Submits a deployed game contract and its token to the network's block explorer.

    The game is verified with its constructor arguments; the token address is read
    from the game and the token is verified with the game address as its only
    constructor argument. By default the first failure stops the sequence; with
    halt_on_failure=False the token is still attempted after a failed game submission.
    """

    class Failed(Exception):
        """Raised when any verification step fails"""

        def __init__(self, report: VerificationReport):
            self.report = report
            step, error = report.failures[0]
            super().__init__(
                f"Verification of {report.game_address} failed at step '{step}': {error}"
            )

    def __init__(
        self,
        game_container: ContractContainer,
        token_container: ContractContainer,
        arguments: GameArguments,
        explorer: Optional[ExplorerAPI] = None,
        halt_on_failure: bool = True,
        check_arguments: bool = True,
        project=None,
    ):
        if explorer is None:
            explorer = networks.provider.network.explorer
        if explorer is None:
            raise ValueError(
                f"No explorer plugin available for network {networks.provider.network.name}."
            )
        if not hasattr(explorer, "_client_factory"):
            raise ValueError(f"Explorer {explorer.name} does not support Etherscan verification.")
        self.game_container = game_container
        self.token_container = token_container
        self.arguments = arguments
        self.explorer = explorer
        self.halt_on_failure = halt_on_failure
        self.check_arguments = check_arguments
        self.project = project

    def submit(
        self, address: ChecksumAddress, container: ContractContainer, args: Sequence[Any]
    ) -> None:
        """Submits a single contract and its ABI-encoded constructor arguments."""
        name = container.contract_type.name
        if not chain.provider.get_code(address):
            raise ValueError(f"No contract code at {address}.")
        encoded_arguments = encode_constructor_arguments(container, args)
        if self.check_arguments:
            check_constructor_arguments(address, container, args)

        print(f"(i) Verifying {name} at {address}...")
        source_verifier = ArgumentSourceVerifier(
            address,
            self.explorer._client_factory,
            encoded_arguments,
            project=self.project,
        )
        source_verifier.attempt_verification()

    def fetch_token_address(self, game_address: ChecksumAddress) -> ChecksumAddress:
        game = self.game_container.at(game_address)
        token_address = to_checksum_address(getattr(game, TOKEN_GETTER)())
        if token_address == ZERO_ADDRESS:
            raise ValueError(f"Game at {game_address} returned the zero address as its token.")
        print(f"(i) Token contract for {game_address} is at {token_address}")
        return token_address

    def _record(self, report: VerificationReport, step: str, error: Exception) -> None:
        logger.error(f"Step '{step}' failed for {report.game_address}: {error}")
        report.fail(step, error)

    def _terminate(self, report: VerificationReport) -> None:
        report.advance(VerificationState.FAILED)
        step, error = report.failures[0]
        raise self.Failed(report) from error

    def _fail(self, report: VerificationReport, step: str, error: Exception) -> None:
        self._record(report, step, error)
        if self.halt_on_failure:
            self._terminate(report)

    def verify(self, game_address: ChecksumAddress) -> VerificationReport:
        game_address = to_checksum_address(game_address)
        report = VerificationReport(game_address)

        try:
            self.submit(game_address, self.game_container, list(self.arguments))
        except Exception as error:
            self._fail(report, SUBMIT_MAIN, error)
            logger.warning("Continuing with the token contract.")
        else:
            report.advance(VerificationState.SUBMITTED_MAIN)

        try:
            report.token_address = self.fetch_token_address(game_address)
        except Exception as error:
            # without a token address there is nothing left to attempt
            self._record(report, FETCH_TOKEN, error)
            self._terminate(report)
        report.advance(VerificationState.FETCHED_TOKEN_ADDR)

        try:
            self.submit(report.token_address, self.token_container, [game_address])
        except Exception as error:
            self._fail(report, SUBMIT_TOKEN, error)
        else:
            report.advance(VerificationState.SUBMITTED_TOKEN)

        if report.failures:
            self._terminate(report)

        report.advance(VerificationState.DONE)
        print(f"(i) Verified {game_address} and its token {report.token_address}")
        return report
