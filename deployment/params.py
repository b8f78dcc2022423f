import typing
from collections import OrderedDict
from pathlib import Path
from typing import Any, List, NamedTuple, Optional

from ape.api import AccountAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance
from ape.utils import ZERO_ADDRESS
from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address
from web3.auto import w3

from deployment.config import DeploymentConfig
from deployment.confirm import confirm_arguments, confirm_continue
from deployment.constants import GUESSING_GAME
from deployment.utils import _load_yaml, check_plugins

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"
VARIABLE_PREFIX = "$"


class GameArguments(NamedTuple):
    """Constructor arguments of GuessingGame, in constructor order."""

    commissioner: ChecksumAddress
    initialAsker: ChecksumAddress
    clueInterval: int
    expirationIntervalAfterFinalClue: int
    nextAskerTimeoutInterval: int


GAME_ADDRESS_FIELDS = ("commissioner", "initialAsker")


def _is_variable(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(VARIABLE_PREFIX)


def _resolve_value(value: Any, constants: typing.Dict[str, Any]) -> Any:
    if isinstance(value, list):
        return [_resolve_value(v, constants) for v in value]
    if not _is_variable(value):
        return value

    name = value[len(VARIABLE_PREFIX) :]
    if not name.isupper():
        raise ConstructorParameters.Invalid(
            f"Variable '{value}' is not a constant; constants must be uppercase."
        )
    try:
        return constants[name]
    except KeyError:
        raise ConstructorParameters.Invalid(f"Constant '{name}' not found in deployment file.")


def _normalize_name(name: str) -> str:
    return name.lstrip("_")


def _validate_game_arguments(parameters: OrderedDict) -> None:
    """Checks the shape and value ranges of the GuessingGame constructor arguments."""
    names = [_normalize_name(name) for name in parameters]
    if names != list(GameArguments._fields):
        raise ConstructorParameters.Invalid(
            f"{GUESSING_GAME} constructor parameters must be, in order, "
            f"{', '.join(GameArguments._fields)}; got {', '.join(names)}."
        )

    for name, value in zip(GameArguments._fields, parameters.values()):
        if name in GAME_ADDRESS_FIELDS:
            if not is_address(value):
                raise ConstructorParameters.Invalid(f"{name} '{value}' is not a valid address.")
            if value == ZERO_ADDRESS:
                raise ConstructorParameters.Invalid(f"{name} cannot be the zero address.")
        elif isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConstructorParameters.Invalid(
                f"{name} must be a positive number of seconds; got '{value}'."
            )


def validate_constructor_abi_inputs(
    contract_name: str,
    abi_inputs: List[Any],
    resolved_parameters: OrderedDict,
) -> None:
    """Validates constructor parameters against the constructor ABI."""
    if len(resolved_parameters) != len(abi_inputs):
        raise ConstructorParameters.Invalid(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(resolved_parameters)}."
        )

    codex = enumerate(zip(abi_inputs, resolved_parameters.items()), start=0)
    for position, (abi_input, (name, value)) in codex:
        if abi_input.name and _normalize_name(abi_input.name) != _normalize_name(name):
            raise ConstructorParameters.Invalid(
                f"{contract_name} constructor parameter '{name}' at position {position} does not "
                f"match the expected ABI name '{abi_input.name}'."
            )
        if not w3.is_encodable(abi_input.type, value):
            raise ConstructorParameters.Invalid(
                f"Constructor param name '{name}' at position {position} has a value '{value}' "
                f"whose type does not match expected ABI type '{abi_input.type}'"
            )


class ConstructorParameters:
    """
    Constructor arguments for a set of contracts, loaded from a deployment YAML file.

    The file is the single source of truth for constructor arguments: deployment
    and verification both resolve them from here.
    """

    class Invalid(Exception):
        """Raised when the constructor parameters are invalid"""

    def __init__(self, parameters: OrderedDict, chain_id: Optional[int] = None):
        self.parameters = parameters
        self.chain_id = chain_id
        if GUESSING_GAME in parameters:
            _validate_game_arguments(parameters[GUESSING_GAME])

    @classmethod
    def from_yaml(cls, filepath: Path) -> "ConstructorParameters":
        config = _load_yaml(filepath)
        return cls.from_config(config)

    @classmethod
    def from_config(cls, config: typing.Dict) -> "ConstructorParameters":
        """Processes the 'contracts' section of a deployment config."""
        if not isinstance(config, dict) or not config.get("contracts"):
            raise cls.Invalid("Constructor parameters file missing 'contracts' field.")

        constants = config.get("constants") or dict()
        chain_id = (config.get("deployment") or dict()).get("chain_id")

        parameters = OrderedDict()
        for contract_info in config["contracts"]:
            if isinstance(contract_info, str):
                parameters[contract_info] = OrderedDict()
                continue
            if not isinstance(contract_info, dict) or len(contract_info) != 1:
                raise cls.Invalid("Malformed constructor parameters YAML.")

            contract_name, contract_data = list(contract_info.items())[0]
            contract_data = contract_data or dict()
            if not isinstance(contract_data, dict):
                raise cls.Invalid(f"Malformed constructor parameter config for {contract_name}.")
            raw_values = contract_data.get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY) or dict()
            if not isinstance(raw_values, dict):
                raise cls.Invalid(f"Malformed constructor parameter config for {contract_name}.")

            parameters[contract_name] = OrderedDict(
                (name, _resolve_value(value, constants)) for name, value in raw_values.items()
            )

        return cls(parameters=parameters, chain_id=int(chain_id) if chain_id else None)

    def validate_chain_id(self, config: DeploymentConfig) -> None:
        """Checks that the file was written for the network being used."""
        if self.chain_id is None or config.is_local:
            return
        if self.chain_id != config.chain_id:
            raise self.Invalid(
                f"chain_id in params file ({self.chain_id}) does not match "
                f"chain_id of current network ({config.chain_id})."
            )

    def resolve(self, contract_name: str) -> OrderedDict:
        """Returns the ordered constructor arguments of a single contract."""
        try:
            parameters = self.parameters[contract_name]
        except KeyError:
            raise self.Invalid(f"No constructor parameters for {contract_name}.")
        return OrderedDict(
            (name, to_checksum_address(value) if is_address(value) else value)
            for name, value in parameters.items()
        )

    def game_arguments(self) -> GameArguments:
        return GameArguments(*self.resolve(GUESSING_GAME).values())

    def validate_against_abi(self, container: ContractContainer) -> None:
        contract_name = container.contract_type.name
        validate_constructor_abi_inputs(
            contract_name=contract_name,
            abi_inputs=container.constructor.abi.inputs,
            resolved_parameters=self.resolve(contract_name),
        )


class DeployedContractReference(NamedTuple):
    """A mined contract deployment on a specific network."""

    name: str
    address: ChecksumAddress
    chain_id: int
    network: str
    tx_hash: str
    block_number: int
    deployer: str

    @classmethod
    def from_instance(
        cls, instance: ContractInstance, config: DeploymentConfig
    ) -> "DeployedContractReference":
        address = to_checksum_address(instance.address)
        if address == ZERO_ADDRESS:
            raise ValueError(f"{instance.contract_type.name} deployment returned the zero address.")
        receipt = instance.receipt
        return cls(
            name=instance.contract_type.name,
            address=address,
            chain_id=config.chain_id,
            network=config.network,
            tx_hash=receipt.txn_hash,
            block_number=receipt.block_number,
            deployer=receipt.transaction.sender,
        )


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account


class Deployer(Transactor):
    """
    Represents an ape account plus
    constructor parameters for a set of contracts, plus validated/annotated execution.
    """

    class InsufficientFunds(Exception):
        """Raised when the deployer account cannot pay for a deployment"""

    def __init__(
        self,
        config: DeploymentConfig,
        parameters: ConstructorParameters,
        path: typing.Optional[Path] = None,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
        publish: bool = False,
        required_confirmations: typing.Optional[int] = None,
    ):
        super().__init__(account, autosign)
        if autosign and not config.is_local:
            self._account.set_autosign(True)

        if publish:
            check_plugins(config)
        parameters.validate_chain_id(config)

        self.config = config
        self.parameters = parameters
        self.path = path
        self.publish = publish
        self.required_confirmations = required_confirmations
        self.deployments: List[DeployedContractReference] = list()
        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            confirm_continue()

    @classmethod
    def from_yaml(cls, filepath: Path, config: DeploymentConfig, *args, **kwargs) -> "Deployer":
        parameters = ConstructorParameters.from_yaml(filepath)
        return cls(config, parameters, filepath, *args, **kwargs)

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        """Returns the deployment kwargs."""
        kwargs = {"publish": self.publish}
        if self.required_confirmations is not None:
            kwargs["required_confirmations"] = self.required_confirmations
        return kwargs

    def check_funds(self) -> None:
        if self.config.is_local:
            return
        balance = self._account.balance
        if not balance:
            raise self.InsufficientFunds(
                f"Deployer account {self._account.address} has no funds on {self.config.network}."
            )

    def _arguments(self, container: ContractContainer, args: tuple) -> OrderedDict:
        contract_name = container.contract_type.name
        if not args:
            self.parameters.validate_against_abi(container)
            return self.parameters.resolve(contract_name)

        abi_inputs = container.constructor.abi.inputs
        if len(args) != len(abi_inputs):
            raise ConstructorParameters.Invalid(
                f"{contract_name} constructor takes {len(abi_inputs)} argument(s), got {len(args)}."
            )
        arguments = OrderedDict(
            (abi_input.name or f"arg{position}", value)
            for position, (abi_input, value) in enumerate(zip(abi_inputs, args))
        )
        validate_constructor_abi_inputs(contract_name, abi_inputs, arguments)
        return arguments

    def deploy(self, container: ContractContainer, *args, **kwargs) -> ContractInstance:
        """
        Deploys a contract and waits for the deployment to be mined. Constructor
        arguments come from the parameters file unless given explicitly.
        """
        contract_name = container.contract_type.name
        arguments = self._arguments(container, args)
        self.check_funds()
        if not self._autosign:
            confirm_arguments(contract_name, arguments)

        instance = self._account.deploy(
            container,
            *arguments.values(),
            **self._get_kwargs(),
            **kwargs,
        )

        reference = DeployedContractReference.from_instance(instance, self.config)
        self.deployments.append(reference)
        print(
            f"{contract_name} contract deployed to network {reference.network} "
            f"at {reference.address}"
        )
        print(
            f"\ttx_hash={reference.tx_hash}",
            f"\tblock_number={reference.block_number}",
            sep="\n",
        )
        return instance

    def _print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Config: {self.path}",
            f"Publish: {self.publish}",
            f"Network: {self.config.network}",
            f"Chain ID: {self.config.chain_id}",
            sep="\n",
        )
