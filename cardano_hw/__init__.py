"""Cardano transaction output streaming for hardware signing devices."""

from .address_parameters import (
    AddressParametersRecord,
    AddressType,
    CertificatePointer,
    address_parameters_to_proto,
    parse_derivation_path,
    validate_address_parameters,
)
from .config import BridgeConfig, ConfigurationError, load_bridge_config
from .hexdata import HexLengthError, hex_byte_length, iter_hex_chunks
from .outputs import (
    MAX_CHUNK_SIZE,
    OutputRecord,
    OutputWithData,
    send_chunked_hex_string,
    send_output,
    transform_output,
)
from .params import ParamSpec, ValidationError, validate_params
from .token_bundle import AssetGroup, AssetGroupWithTokens, token_bundle_to_proto
from .transport import (
    BridgeTransport,
    DeviceFailureError,
    RecordingTransport,
    TransportError,
    TypedCall,
    UnexpectedMessageError,
)

__all__ = [
    "AddressParametersRecord",
    "AddressType",
    "CertificatePointer",
    "address_parameters_to_proto",
    "parse_derivation_path",
    "validate_address_parameters",
    "BridgeConfig",
    "ConfigurationError",
    "load_bridge_config",
    "HexLengthError",
    "hex_byte_length",
    "iter_hex_chunks",
    "MAX_CHUNK_SIZE",
    "OutputRecord",
    "OutputWithData",
    "send_chunked_hex_string",
    "send_output",
    "transform_output",
    "ParamSpec",
    "ValidationError",
    "validate_params",
    "AssetGroup",
    "AssetGroupWithTokens",
    "token_bundle_to_proto",
    "BridgeTransport",
    "DeviceFailureError",
    "RecordingTransport",
    "TransportError",
    "TypedCall",
    "UnexpectedMessageError",
]
