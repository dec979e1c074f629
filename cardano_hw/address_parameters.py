"""Address parameter validation and conversion to device records.

Address parameters describe a destination the device derives itself (from a
BIP-32 path, a staking path or key hash, a certificate pointer, or script
hashes) instead of a literal bech32/base58 address string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping, Sequence

from .params import ParamSpec, ValidationError, validate_params

HARDENED = 0x80000000


class AddressType(IntEnum):
    BASE = 0
    BASE_SCRIPT_KEY = 1
    BASE_KEY_SCRIPT = 2
    BASE_SCRIPT_SCRIPT = 3
    POINTER = 4
    POINTER_SCRIPT = 5
    ENTERPRISE = 6
    ENTERPRISE_SCRIPT = 7
    BYRON = 8
    REWARD = 14
    REWARD_SCRIPT = 15


@dataclass(frozen=True)
class CertificatePointer:
    block_index: int
    tx_index: int
    certificate_index: int

    def to_message(self) -> dict[str, int]:
        return {
            "block_index": self.block_index,
            "tx_index": self.tx_index,
            "certificate_index": self.certificate_index,
        }


@dataclass(frozen=True)
class AddressParametersRecord:
    """Wire-ready address parameters understood by the device."""

    address_type: int
    address_n: list[int] = field(default_factory=list)
    address_n_staking: list[int] = field(default_factory=list)
    staking_key_hash: str | None = None
    certificate_pointer: CertificatePointer | None = None
    script_payment_hash: str | None = None
    script_staking_hash: str | None = None

    def to_message(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "address_type": self.address_type,
            "address_n": list(self.address_n),
            "address_n_staking": list(self.address_n_staking),
        }
        if self.staking_key_hash is not None:
            data["staking_key_hash"] = self.staking_key_hash
        if self.certificate_pointer is not None:
            data["certificate_pointer"] = self.certificate_pointer.to_message()
        if self.script_payment_hash is not None:
            data["script_payment_hash"] = self.script_payment_hash
        if self.script_staking_hash is not None:
            data["script_staking_hash"] = self.script_staking_hash
        return data


def _parse_path_segment(segment: str) -> int:
    hardened = segment.endswith("'") or segment.endswith("h")
    digits = segment[:-1] if hardened else segment
    if not (digits.isascii() and digits.isdigit()):
        raise ValidationError("Not a valid path", "path")
    index = int(digits)
    if index >= HARDENED:
        raise ValidationError("Not a valid path", "path")
    return index | HARDENED if hardened else index


def parse_derivation_path(path: Any, min_length: int = 0) -> list[int]:
    """Return *path* as a list of BIP-32 indices.

    ``path`` may be a string such as ``"m/1852'/1815'/0'/0/0"`` or a sequence of
    already-encoded integer indices.
    """

    if isinstance(path, str):
        parts = path.lower().split("/")
        if parts[0] != "m":
            raise ValidationError("Not a valid path", "path")
        indices = [_parse_path_segment(part) for part in parts[1:] if part]
    elif isinstance(path, Sequence):
        indices = []
        for index in path:
            if isinstance(index, bool) or not isinstance(index, int) or index < 0:
                raise ValidationError("Not a valid path", "path")
            indices.append(index)
    else:
        raise ValidationError("Not a valid path", "path")

    if len(indices) < min_length:
        raise ValidationError("Not a valid path", "path")
    return indices


def validate_address_parameters(params: Any) -> None:
    """Raise :class:`ValidationError` if *params* is structurally malformed."""

    validate_params(
        params,
        [
            ParamSpec("addressType", "uint", required=True),
            ParamSpec("stakingKeyHash", "string"),
            ParamSpec("paymentScriptHash", "string"),
            ParamSpec("stakingScriptHash", "string"),
            ParamSpec("certificatePointer", "object"),
        ],
    )
    if params.get("path"):
        parse_derivation_path(params["path"])
    if params.get("stakingPath"):
        parse_derivation_path(params["stakingPath"])
    if params.get("certificatePointer"):
        validate_params(
            params["certificatePointer"],
            [
                ParamSpec("blockIndex", "uint", required=True),
                ParamSpec("txIndex", "uint", required=True),
                ParamSpec("certificateIndex", "uint", required=True),
            ],
        )


def address_parameters_to_proto(params: Mapping[str, Any]) -> AddressParametersRecord:
    """Convert validated caller parameters into an :class:`AddressParametersRecord`."""

    path = parse_derivation_path(params["path"], 3) if params.get("path") else []
    staking_path = (
        parse_derivation_path(params["stakingPath"], 3) if params.get("stakingPath") else []
    )

    pointer = None
    pointer_params = params.get("certificatePointer")
    if pointer_params:
        pointer = CertificatePointer(
            block_index=int(pointer_params["blockIndex"]),
            tx_index=int(pointer_params["txIndex"]),
            certificate_index=int(pointer_params["certificateIndex"]),
        )

    return AddressParametersRecord(
        address_type=int(params["addressType"]),
        address_n=path,
        address_n_staking=staking_path,
        staking_key_hash=params.get("stakingKeyHash"),
        certificate_pointer=pointer,
        script_payment_hash=params.get("paymentScriptHash"),
        script_staking_hash=params.get("stakingScriptHash"),
    )
