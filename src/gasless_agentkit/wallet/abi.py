"""Minimal ABI helpers: selectors, call encoding, log decoding."""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode, encode
from web3 import Web3


def selector(name: str, arg_types: Sequence[str]) -> bytes:
    return bytes(Web3.keccak(text=f"{name}({','.join(arg_types)})")[:4])


def _checksum_args(arg_types: Sequence[str], args: Sequence[Any]) -> list[Any]:
    # eth_abi rejects mixed-case addresses with a bad checksum
    normalized = []
    for arg_type, arg in zip(arg_types, args):
        if arg_type == "address" and isinstance(arg, str):
            arg = Web3.to_checksum_address(arg)
        elif arg_type == "address[]":
            arg = [Web3.to_checksum_address(a) for a in arg]
        normalized.append(arg)
    return normalized


def encode_args(arg_types: Sequence[str], args: Sequence[Any]) -> bytes:
    return encode(list(arg_types), _checksum_args(arg_types, args))


def encode_call(name: str, arg_types: Sequence[str], args: Sequence[Any]) -> str:
    """Return ``0x``-prefixed calldata for ``name(arg_types...)``."""
    return "0x" + (selector(name, arg_types) + encode_args(arg_types, args)).hex()


def decode_result(types: Sequence[str], data: bytes | str) -> tuple:
    if isinstance(data, str):
        data = bytes.fromhex(data.removeprefix("0x"))
    return decode(list(types), bytes(data))


def event_topic(name: str, arg_types: Sequence[str]) -> str:
    return "0x" + bytes(Web3.keccak(text=f"{name}({','.join(arg_types)})")).hex()


def to_hex(value: int) -> str:
    return hex(value)


def from_hex(value: str | int | None) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return int(value, 16) if value.startswith("0x") else int(value)


def hexstr(data: bytes) -> str:
    return "0x" + bytes(data).hex()
