from dataclasses import dataclass
from typing import Any
from eth_abi.abi import encode as abi_encode, decode as abi_decode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils.address import to_checksum_address
from eth_utils.crypto import keccak

from clients.evm.errors import DecodeError


@dataclass(frozen=True)
class ViewFunction:
    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return keccak(text=self.signature)[:4]


VIEW_FUNCTIONS = [
    # pool pair lookups
    ViewFunction("token0", (), ("address",)),
    ViewFunction("token1", (), ("address",)),
    ViewFunction("fee", (), ("uint24",)),
    # pool state
    ViewFunction(
        "slot0",
        (),
        ("uint160", "int24", "uint16", "uint16", "uint16", "uint8", "bool"),
    ),
    ViewFunction("liquidity", (), ("uint128",)),
    # erc20
    ViewFunction("symbol", (), ("string",)),
    ViewFunction("name", (), ("string",)),
    ViewFunction("decimals", (), ("uint8",)),
    ViewFunction("balanceOf", ("address",), ("uint256",)),
]


class CallCodec:
    """ABI codec for the fixed set of read-only functions the engine issues.

    ``encode`` builds calldata, ``decode`` turns raw return data into Python
    values: a scalar for single-output functions, a tuple otherwise. Address
    values come back checksummed.
    """

    def __init__(self, functions: list[ViewFunction] | None = None):
        self._functions = {f.name: f for f in (functions or VIEW_FUNCTIONS)}
        self._by_selector = {f.selector: f for f in self._functions.values()}

    def __contains__(self, function_name: str) -> bool:
        return function_name in self._functions

    def get(self, function_name: str) -> ViewFunction:
        function = self._functions.get(function_name)
        if function is None:
            raise ValueError(f"Unregistered function: {function_name}")
        return function

    def encode(self, function_name: str, args: tuple | list = ()) -> bytes:
        function = self.get(function_name)

        if len(args) != len(function.inputs):
            raise ValueError(
                f"{function.signature} expects {len(function.inputs)} args, got {len(args)}"
            )

        try:
            return function.selector + abi_encode(list(function.inputs), list(args))
        except EncodingError as e:
            raise ValueError(f"Cannot encode {function.signature}: {e}") from e

    def decode(self, function_name: str, return_data: bytes) -> Any:
        function = self._functions.get(function_name)
        if function is None:
            raise DecodeError(f"Unregistered function: {function_name}")

        if not return_data:
            raise DecodeError(f"Empty return data for {function.signature}")

        try:
            values = abi_decode(list(function.outputs), bytes(return_data))
        except (DecodingError, TypeError, ValueError) as e:
            raise DecodeError(f"Malformed return data for {function.signature}: {e}") from e

        values = self._normalize(function.outputs, values)

        if len(values) == 1:
            return values[0]
        return values

    def encode_result(self, function_name: str, value: Any) -> bytes:
        function = self.get(function_name)
        values = [value] if len(function.outputs) == 1 else list(value)

        try:
            return abi_encode(list(function.outputs), values)
        except EncodingError as e:
            raise ValueError(f"Cannot encode result of {function.signature}: {e}") from e

    def decode_call(self, call_data: bytes) -> tuple[str, tuple]:
        function = self._by_selector.get(bytes(call_data[:4]))
        if function is None:
            raise DecodeError(f"Unknown selector: 0x{bytes(call_data[:4]).hex()}")

        try:
            args = abi_decode(list(function.inputs), bytes(call_data[4:]))
        except (DecodingError, TypeError, ValueError) as e:
            raise DecodeError(f"Malformed calldata for {function.signature}: {e}") from e

        return function.name, self._normalize(function.inputs, args)

    @staticmethod
    def _normalize(types: tuple[str, ...], values: tuple) -> tuple:
        return tuple(
            to_checksum_address(v) if t == "address" else v
            for t, v in zip(types, values)
        )


codec = CallCodec()
