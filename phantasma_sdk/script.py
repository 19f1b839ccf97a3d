"""
Script builder for transaction payloads
"""

from typing import Any, List, Tuple

from .serialization import BinaryWriter

# Argument type tags
ARG_BYTES = 0
ARG_STRING = 1
ARG_NUMBER = 2
ARG_BOOL = 3

GAS_CONTRACT = "gas"


class ScriptBuilder:
    """
    Builds an ordered list of contract calls.

    Example:
        >>> script = (ScriptBuilder()
        ...     .allow_gas(keys.address, 1, 9999)
        ...     .call_contract("nexus", "CreateToken", keys.address, "CAR", "Car Demo Token", 10000, 0, 5)
        ...     .spend_gas(keys.address)
        ...     .end_script())
    """

    def __init__(self):
        self._calls: List[Tuple[str, str, tuple]] = []

    def call_contract(self, contract: str, method: str, *args: Any) -> "ScriptBuilder":
        """
        Append a contract method call.

        Args:
            contract: Contract name (e.g. "token")
            method: Method name (e.g. "MintToken")
            *args: str, int, bool or bytes arguments
        """
        for arg in args:
            if not isinstance(arg, (str, int, bytes, bytearray)):
                raise TypeError(f"unsupported script argument: {type(arg).__name__}")
        self._calls.append((contract, method, args))
        return self

    def allow_gas(self, address: str, gas_price: int, gas_limit: int) -> "ScriptBuilder":
        return self.call_contract(GAS_CONTRACT, "AllowGas", address, gas_price, gas_limit)

    def spend_gas(self, address: str) -> "ScriptBuilder":
        return self.call_contract(GAS_CONTRACT, "SpendGas", address)

    @property
    def calls(self) -> List[Tuple[str, str, tuple]]:
        return list(self._calls)

    def end_script(self) -> bytes:
        """Serialize the calls into script bytes"""
        writer = BinaryWriter()
        writer.write_var_int(len(self._calls))
        for contract, method, args in self._calls:
            writer.write_string(contract)
            writer.write_string(method)
            writer.write_var_int(len(args))
            for arg in args:
                _write_arg(writer, arg)
        return writer.to_bytes()


def _write_arg(writer: BinaryWriter, arg: Any):
    # bool before int: bool is an int subclass
    if isinstance(arg, bool):
        writer.write_byte(ARG_BOOL).write_byte(1 if arg else 0)
    elif isinstance(arg, int):
        writer.write_byte(ARG_NUMBER).write_big_integer(arg)
    elif isinstance(arg, str):
        writer.write_byte(ARG_STRING).write_string(arg)
    else:
        writer.write_byte(ARG_BYTES).write_bytes(bytes(arg))
