"""Message type tags exchanged with the signing device."""

from __future__ import annotations

from enum import IntEnum

TX_OUTPUT = "CardanoTxOutput"
ASSET_GROUP = "CardanoAssetGroup"
TOKEN = "CardanoToken"
INLINE_DATUM_CHUNK = "CardanoTxInlineDatumChunk"
REFERENCE_SCRIPT_CHUNK = "CardanoTxReferenceScriptChunk"

# Every transaction item is answered with the same acknowledgement.
TX_ITEM_ACK = "CardanoTxItemAck"
FAILURE = "Failure"


class OutputSerializationFormat(IntEnum):
    ARRAY_LEGACY = 0
    MAP_BABBAGE = 1
