import pytest

from cardano_hw import messages
from cardano_hw.outputs import (
    MAX_CHUNK_SIZE,
    send_chunked_hex_string,
    send_output,
    transform_output,
)
from cardano_hw.transport import RecordingTransport, TransportError

ADDRESS = "addr1vx2fxv2umyhttkxyxp8x0dlpdt3k6cwng5pxj3jhsydzers66hrl8"


class OrderCheckingCall:
    """Fails if a message is sent while another is still awaiting its reply."""

    def __init__(self) -> None:
        self.in_flight = False
        self.sent: list[str] = []

    def __call__(self, message_type, expected_type, payload):
        assert not self.in_flight
        assert expected_type == messages.TX_ITEM_ACK
        self.in_flight = True
        self.sent.append(message_type)
        self.in_flight = False
        return {}


def test_plain_output_sends_single_header() -> None:
    recorder = RecordingTransport()
    send_output(recorder, transform_output({"amount": 1000000, "address": ADDRESS}))

    assert recorder.calls == [
        (
            messages.TX_OUTPUT,
            messages.TX_ITEM_ACK,
            {"amount": 1000000, "asset_groups_count": 0, "address": ADDRESS},
        )
    ]


def test_token_bundle_message_order() -> None:
    t1 = {"asset_name_bytes": "7431", "amount": 1}
    t2 = {"asset_name_bytes": "7432", "amount": 2}
    t3 = {"asset_name_bytes": "7433", "amount": 3}
    output = transform_output(
        {
            "amount": 1,
            "address": ADDRESS,
            "tokenBundle": [
                {"policyId": "p1", "tokens": [t1, t2]},
                {"policyId": "p2", "tokens": [t3]},
            ],
        }
    )
    recorder = RecordingTransport()

    send_output(recorder, output)

    assert recorder.message_types == [
        messages.TX_OUTPUT,
        messages.ASSET_GROUP,
        messages.TOKEN,
        messages.TOKEN,
        messages.ASSET_GROUP,
        messages.TOKEN,
    ]
    payloads = [payload for _, _, payload in recorder.calls]
    assert payloads[0]["asset_groups_count"] == 2
    assert payloads[1] == {"policy_id": "p1", "tokens_count": 2}
    assert payloads[2:4] == [t1, t2]
    assert payloads[4] == {"policy_id": "p2", "tokens_count": 1}
    assert payloads[5] == t3


def test_inline_datum_is_chunked() -> None:
    datum = "ab" * 2048
    recorder = RecordingTransport()

    send_output(recorder, transform_output({"amount": 1, "address": ADDRESS, "inlineDatum": datum}))

    chunks = [payload["data"] for kind, _, payload in recorder.calls if kind == messages.INLINE_DATUM_CHUNK]
    assert len(chunks) == 2
    assert all(len(chunk) == MAX_CHUNK_SIZE for chunk in chunks)
    assert "".join(chunks) == datum
    assert recorder.calls[0][2]["inline_datum_size"] == 2048


def test_full_output_sequence_order() -> None:
    output = transform_output(
        {
            "amount": 1,
            "address": ADDRESS,
            "tokenBundle": [{"policyId": "p1", "tokens": [{"asset_name_bytes": "01", "amount": 1}]}],
            "inlineDatum": "00" * 1500,
            "referenceScript": "11" * 10,
        }
    )
    call = OrderCheckingCall()

    send_output(call, output)

    assert call.sent == [
        messages.TX_OUTPUT,
        messages.ASSET_GROUP,
        messages.TOKEN,
        messages.INLINE_DATUM_CHUNK,
        messages.INLINE_DATUM_CHUNK,
        messages.REFERENCE_SCRIPT_CHUNK,
    ]


def test_empty_inline_datum_sends_no_chunks() -> None:
    recorder = RecordingTransport()

    send_output(recorder, transform_output({"amount": 1, "address": ADDRESS, "inlineDatum": ""}))

    assert recorder.message_types == [messages.TX_OUTPUT]
    assert recorder.calls[0][2]["inline_datum_size"] == 0


def test_opaque_tokens_are_sent_unchanged() -> None:
    output = transform_output(
        {"amount": 1, "address": ADDRESS, "tokenBundle": [{"policyId": "p1", "tokens": ["t1", "t2"]}]}
    )
    recorder = RecordingTransport()

    send_output(recorder, output)

    assert [payload for kind, _, payload in recorder.calls if kind == messages.TOKEN] == ["t1", "t2"]
    assert recorder.calls[1][2] == {"policy_id": "p1", "tokens_count": 2}


def test_send_chunked_hex_string_returns_chunk_count() -> None:
    recorder = RecordingTransport()

    sent = send_chunked_hex_string(recorder, "0123456789", 4, messages.REFERENCE_SCRIPT_CHUNK)

    assert sent == 3
    assert [payload["data"] for _, _, payload in recorder.calls] == ["0123", "4567", "89"]


def test_failed_acknowledgement_aborts_remaining_sequence() -> None:
    output = transform_output(
        {"amount": 1, "address": ADDRESS, "inlineDatum": "ab" * 4096, "referenceScript": "cd" * 4}
    )
    recorder = RecordingTransport(fail_on=2)

    with pytest.raises(TransportError):
        send_output(recorder, output)

    assert recorder.message_types == [messages.TX_OUTPUT, messages.INLINE_DATUM_CHUNK]


def test_header_failure_sends_nothing_else() -> None:
    recorder = RecordingTransport(fail_on=0)

    with pytest.raises(TransportError):
        send_output(recorder, transform_output({"amount": 1, "address": ADDRESS, "referenceScript": "00"}))

    assert recorder.calls == []
