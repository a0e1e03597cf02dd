from typing import Any
from eth_utils.address import is_checksum_address, is_hex_address, to_checksum_address


ADDRESS_HEX_LENGTH = 42


def validate(candidate: Any) -> bool:
    if not isinstance(candidate, str):
        return False

    if len(candidate) != ADDRESS_HEX_LENGTH or not candidate.startswith("0x"):
        return False

    if not is_hex_address(candidate):
        return False

    # single-case addresses carry no checksum
    body = candidate[2:]
    if body == body.lower() or body == body.upper():
        return True

    return is_checksum_address(candidate)


def filter_valid(candidates: list[Any]) -> list[str]:
    return [to_checksum_address(c) for c in candidates if validate(c)]
