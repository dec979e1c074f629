"""Transaction output records and their transmission to the device.

:func:`transform_output` turns a caller-supplied output description into an
:class:`OutputWithData`: the canonical header record plus the side payloads
(token bundle, inline datum, reference script) that travel after it.
:func:`send_output` then streams that value over a typed-call channel in a
fixed order, waiting for each acknowledgement before sending the next message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from . import messages
from .address_parameters import (
    AddressParametersRecord,
    address_parameters_to_proto,
    validate_address_parameters,
)
from .hexdata import hex_byte_length, iter_hex_chunks
from .params import ParamSpec, ValidationError, validate_params
from .token_bundle import AssetGroup, token_bundle_to_proto
from .transport import TypedCall

logger = logging.getLogger(__name__)

# 1024 bytes, hex encoded
MAX_CHUNK_SIZE = 1024 * 2

_OUTPUT_SCHEMA = [
    ParamSpec("address", "string"),
    ParamSpec("amount", "uint", required=True),
    ParamSpec("tokenBundle", "array", allow_empty=True),
    ParamSpec("datumHash", "string"),
    ParamSpec("format", "number"),
    ParamSpec("inlineDatum", "string"),
    ParamSpec("referenceScript", "string"),
]


@dataclass(frozen=True)
class OutputRecord:
    """Canonical output header sent as the first message of an output.

    Exactly one of ``address`` and ``address_parameters`` is set. Optional
    fields hold ``None`` when absent and are left out of :meth:`to_message`, so
    a zero ``inline_datum_size`` still reaches the device.
    """

    amount: int | str
    asset_groups_count: int = 0
    datum_hash: str | None = None
    format: int | float | None = None
    inline_datum_size: int | None = None
    reference_script_size: int | None = None
    address: str | None = None
    address_parameters: AddressParametersRecord | None = None

    def __post_init__(self) -> None:
        if (self.address is None) == (self.address_parameters is None):
            raise ValueError("OutputRecord needs exactly one of address or address_parameters")

    def to_message(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "amount": self.amount,
            "asset_groups_count": self.asset_groups_count,
        }
        optional = {
            "datum_hash": self.datum_hash,
            "format": self.format,
            "inline_datum_size": self.inline_datum_size,
            "reference_script_size": self.reference_script_size,
            "address": self.address,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.address_parameters is not None:
            data["address_parameters"] = self.address_parameters.to_message()
        return data


@dataclass(frozen=True)
class OutputWithData:
    """An output header together with the payloads streamed after it."""

    output: OutputRecord
    token_bundle: tuple[AssetGroup, ...] | None = None
    inline_datum: str | None = None
    reference_script: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"output": self.output.to_message()}
        if self.token_bundle is not None:
            data["token_bundle"] = [group.to_dict() for group in self.token_bundle]
        if self.inline_datum is not None:
            data["inline_datum"] = self.inline_datum
        if self.reference_script is not None:
            data["reference_script"] = self.reference_script
        return data


def transform_output(output: Mapping[str, Any]) -> OutputWithData:
    """Validate a caller output description and build its :class:`OutputWithData`.

    ``addressParameters`` takes precedence over ``address``: when both are
    given the literal address is dropped. A ``tokenBundle`` that is present but
    empty still produces an (empty) bundle with ``asset_groups_count`` of 0.
    """

    validate_params(output, _OUTPUT_SCHEMA)

    inline_datum = output.get("inlineDatum")
    reference_script = output.get("referenceScript")

    address = None
    address_parameters = None
    if output.get("addressParameters") is not None:
        validate_address_parameters(output["addressParameters"])
        address_parameters = address_parameters_to_proto(output["addressParameters"])
        if output.get("address") is not None:
            logger.debug("Ignoring address in favour of addressParameters")
    elif output.get("address") is not None:
        address = output["address"]
    else:
        raise ValidationError('Parameter "address" is missing.', "address")

    token_bundle = None
    if output.get("tokenBundle") is not None:
        token_bundle = tuple(token_bundle_to_proto(output["tokenBundle"]))

    record = OutputRecord(
        amount=output["amount"],
        asset_groups_count=len(token_bundle) if token_bundle is not None else 0,
        datum_hash=output.get("datumHash"),
        format=output.get("format"),
        inline_datum_size=hex_byte_length(inline_datum) if inline_datum is not None else None,
        reference_script_size=(
            hex_byte_length(reference_script) if reference_script is not None else None
        ),
        address=address,
        address_parameters=address_parameters,
    )
    return OutputWithData(
        output=record,
        token_bundle=token_bundle,
        inline_datum=inline_datum,
        reference_script=reference_script,
    )


def send_chunked_hex_string(
    typed_call: TypedCall, data: str, chunk_size: int, message_type: str
) -> int:
    """Stream *data* as ``message_type`` chunks, one acknowledgement at a time.

    Returns the number of chunks sent. An empty string sends nothing. The
    first unacknowledged chunk aborts the transfer; chunks already accepted by
    the device are not revisited.
    """

    sent = 0
    for chunk in iter_hex_chunks(data, chunk_size):
        typed_call(message_type, messages.TX_ITEM_ACK, {"data": chunk})
        sent += 1
        logger.debug("%s chunk %d acknowledged (%d hex chars)", message_type, sent, len(chunk))
    return sent


def send_output(typed_call: TypedCall, output_with_data: OutputWithData) -> None:
    """Transmit one output: header, token bundle, inline datum, reference script."""

    output = output_with_data.output
    typed_call(messages.TX_OUTPUT, messages.TX_ITEM_ACK, output.to_message())

    if output_with_data.token_bundle is not None:
        for group in output_with_data.token_bundle:
            typed_call(messages.ASSET_GROUP, messages.TX_ITEM_ACK, group.header_message())
            for token in group.tokens:
                typed_call(messages.TOKEN, messages.TX_ITEM_ACK, token)

    if output_with_data.inline_datum is not None:
        send_chunked_hex_string(
            typed_call,
            output_with_data.inline_datum,
            MAX_CHUNK_SIZE,
            messages.INLINE_DATUM_CHUNK,
        )

    if output_with_data.reference_script is not None:
        send_chunked_hex_string(
            typed_call,
            output_with_data.reference_script,
            MAX_CHUNK_SIZE,
            messages.REFERENCE_SCRIPT_CHUNK,
        )

    logger.info(
        "Sent output with %d asset group(s), datum=%s, script=%s",
        output.asset_groups_count,
        output.inline_datum_size,
        output.reference_script_size,
    )
