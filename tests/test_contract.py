import pytest

from chainkit.testutil.contract import Contract, Event, new_event


def test_event_signature_known_value():
    event = new_event("Transfer", "address", True, "address", True, "uint256", False)
    assert event.signature() == (
        "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    )


def test_event_declaration():
    event = Event("A").add("uint256", True).add("uint256", False)
    assert event.declaration() == "event A(uint256 indexed val_0, uint256 val_1);"


def test_setter_marks_memory_types():
    setter = new_event("B", "string", False, "uint256[]", False, "uint256", True).setter()
    assert setter.startswith("function setterB(")
    assert "string memory val_0" in setter
    assert "uint256[] memory val_1" in setter
    assert "uint256 val_2" in setter and "uint256 memory val_2" not in setter
    assert "emit B(val_0, val_1, val_2);" in setter


def test_new_event_requires_pairs():
    with pytest.raises(ValueError):
        new_event("A", "uint256")
    with pytest.raises(TypeError):
        new_event("A", True, "uint256")


def test_contract_render_and_events():
    contract = Contract()
    event = new_event("A", "uint256", True)
    contract.add_event(event)
    contract.emit_event("setA1", "A", "1")
    source = contract.render()
    assert source.startswith("pragma solidity ^0.5.5;\n")
    assert "contract Sample {\n" in source
    assert source.endswith("}")
    assert event.declaration() in source
    assert event.setter() in source
    assert "emit A(1);" in source
    assert contract.get_event("A") is event
    assert contract.get_event("missing") is None


def test_emit_unknown_event_fails():
    with pytest.raises(ValueError):
        Contract().emit_event("f", "Nope")


def test_constructor_and_callers():
    contract = Contract()
    contract.add_constructor("uint256", "address")
    contract.add_dual_caller("echo", "uint256", "bool")
    contract.add_output_caller("one")
    source = contract.render()
    assert "uint256 public val_0;\naddress public val_1;\n" in source
    assert "constructor(uint256 local_0,address local_1) public {" in source
    assert "val_1 = local_1;" in source
    assert "function echo(uint256 val_0,bool val_1) public view returns (uint256,bool)" in source
    assert "return (val_0,val_1);" in source
    assert "function one () public view returns (uint256)" in source