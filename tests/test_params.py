import pytest
from ape.utils import ZERO_ADDRESS

from deployment.constants import CONSTRUCTOR_PARAMS_DIR, GUESSING_GAME, RINKEBY
from deployment.params import ConstructorParameters, DeployedContractReference, GameArguments
from deployment.utils import game_params_filepath
from tests.conftest import COMMISSIONER, GAME_ADDRESS, TEN_MINUTES, game_config, make_instance


def test_rinkeby_game_arguments():
    filepath = game_params_filepath(RINKEBY)
    assert filepath == CONSTRUCTOR_PARAMS_DIR / RINKEBY / "game.yml"

    parameters = ConstructorParameters.from_yaml(filepath)
    assert parameters.chain_id == 4
    assert parameters.game_arguments() == GameArguments(
        commissioner=COMMISSIONER,
        initialAsker=COMMISSIONER,
        clueInterval=TEN_MINUTES,
        expirationIntervalAfterFinalClue=TEN_MINUTES,
        nextAskerTimeoutInterval=TEN_MINUTES,
    )


def test_local_game_arguments_are_valid():
    parameters = ConstructorParameters.from_yaml(game_params_filepath("local"))
    assert parameters.chain_id is None
    assert len(parameters.game_arguments()) == 5


def test_unknown_network_has_no_parameters():
    with pytest.raises(ValueError, match="No constructor parameters"):
        game_params_filepath("mainnet")


def test_arguments_are_stable_across_reads():
    filepath = game_params_filepath(RINKEBY)
    for_deployment = ConstructorParameters.from_yaml(filepath)
    for_verification = ConstructorParameters.from_yaml(filepath)

    assert for_deployment.game_arguments() == for_verification.game_arguments()
    assert for_deployment.game_arguments() == for_deployment.game_arguments()
    assert list(for_deployment.resolve(GUESSING_GAME)) == list(GameArguments._fields)


def test_addresses_are_checksummed():
    parameters = ConstructorParameters.from_config(
        game_config(commissioner=COMMISSIONER.lower())
    )
    assert parameters.game_arguments().commissioner == COMMISSIONER


def test_unknown_constant():
    with pytest.raises(ConstructorParameters.Invalid, match="'MISSING' not found"):
        ConstructorParameters.from_config(game_config(clueInterval="$MISSING"))


def test_lowercase_variable_is_not_a_constant():
    with pytest.raises(ConstructorParameters.Invalid, match="must be uppercase"):
        ConstructorParameters.from_config(game_config(initialAsker="$deployer"))


@pytest.mark.parametrize("interval", [0, -600, "600", True, 1.5])
def test_intervals_must_be_positive_integers(interval):
    with pytest.raises(ConstructorParameters.Invalid, match="positive number of seconds"):
        ConstructorParameters.from_config(game_config(nextAskerTimeoutInterval=interval))


def test_invalid_address():
    with pytest.raises(ConstructorParameters.Invalid, match="not a valid address"):
        ConstructorParameters.from_config(game_config(commissioner="0xdeadbeef"))


def test_zero_address_is_rejected():
    with pytest.raises(ConstructorParameters.Invalid, match="zero address"):
        ConstructorParameters.from_config(game_config(initialAsker=ZERO_ADDRESS))


def test_argument_order_matters():
    config = game_config()
    constructor = config["contracts"][0][GUESSING_GAME]["constructor"]
    reordered = dict(reversed(list(constructor.items())))
    config["contracts"][0][GUESSING_GAME]["constructor"] = reordered

    with pytest.raises(ConstructorParameters.Invalid, match="must be, in order"):
        ConstructorParameters.from_config(config)


def test_missing_contracts_section():
    with pytest.raises(ConstructorParameters.Invalid, match="missing 'contracts'"):
        ConstructorParameters.from_config({"constants": {}})


def test_malformed_contract_entry():
    with pytest.raises(ConstructorParameters.Invalid, match="Malformed"):
        ConstructorParameters.from_config({"contracts": [{"A": {}, "B": {}}]})


@pytest.mark.parametrize("contract_data", [[1, 2], "600", 600])
def test_contract_entry_must_be_a_mapping(contract_data):
    config = {"contracts": [{GUESSING_GAME: contract_data}]}
    with pytest.raises(ConstructorParameters.Invalid, match="Malformed constructor parameter"):
        ConstructorParameters.from_config(config)


def test_contract_without_constructor():
    parameters = ConstructorParameters.from_config({"contracts": ["Lock"]})
    assert parameters.resolve("Lock") == {}
    with pytest.raises(ConstructorParameters.Invalid, match="No constructor parameters"):
        parameters.resolve(GUESSING_GAME)


def test_validate_against_abi(parameters, game_container):
    parameters.validate_against_abi(game_container)


def test_validate_against_abi_underscored_names(parameters, game_container):
    for abi_input in game_container.constructor.abi.inputs:
        abi_input.name = f"_{abi_input.name}"
    parameters.validate_against_abi(game_container)


def test_validate_against_abi_length_mismatch(parameters, game_container):
    game_container.constructor.abi.inputs.pop()
    with pytest.raises(ConstructorParameters.Invalid, match="length mismatch"):
        parameters.validate_against_abi(game_container)


def test_validate_against_abi_type_mismatch(parameters, game_container):
    game_container.constructor.abi.inputs[2].type = "address"
    with pytest.raises(ConstructorParameters.Invalid, match="does not match expected ABI type"):
        parameters.validate_against_abi(game_container)


def test_chain_id_mismatch(parameters, live_config, local_config):
    parameters.validate_chain_id(live_config)
    parameters.validate_chain_id(local_config)

    with pytest.raises(ConstructorParameters.Invalid, match="does not match"):
        parameters.validate_chain_id(live_config._replace(chain_id=1))


def test_deployed_contract_reference(live_config):
    instance = make_instance(GUESSING_GAME, GAME_ADDRESS.lower(), tx_hash="0xfeed", block_number=7)
    reference = DeployedContractReference.from_instance(instance, live_config)

    assert reference.name == GUESSING_GAME
    assert reference.address == GAME_ADDRESS
    assert reference.chain_id == live_config.chain_id
    assert reference.network == RINKEBY
    assert reference.tx_hash == "0xfeed"
    assert reference.block_number == 7


def test_deployed_contract_reference_zero_address(live_config):
    instance = make_instance(GUESSING_GAME, ZERO_ADDRESS)
    with pytest.raises(ValueError, match="zero address"):
        DeployedContractReference.from_instance(instance, live_config)
