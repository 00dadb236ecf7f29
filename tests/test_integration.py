"""
Integration tests for gsmcipher.

Tests end-to-end workflows combining the cipher and the audit log.
"""

import pytest

from gsmcipher import main as demo
from gsmcipher.core_crypto.a52_cipher import (
    A52Cipher, Direction, REFERENCE_OUTPUT_TAPS, BURST_BYTES, BURST_BITS,
    generate_keystreams, key_fingerprint, xor_bytes,
)
from gsmcipher.integration.event_logger import (
    EventLogger, EventType, CipherEvent, create_event_logger
)


REFERENCE_KEY = bytes.fromhex("00fcffffffffffff")
SAMPLE_KEY = bytes.fromhex("1223456789abcdef")


class TestBurstWorkflow:
    """Burst encryption with A52Cipher."""

    def test_reference_keystreams(self):
        cipher = A52Cipher(REFERENCE_KEY, taps=REFERENCE_OUTPUT_TAPS)
        assert cipher.keystream(0x21, Direction.A_TO_B).hex() == \
            "f4512cac13593764460b722dadd500"
        assert cipher.keystream(0x21, Direction.B_TO_A).hex() == \
            "4800d4328e16a14dcd7b9722265100"

    def test_encrypt_decrypt_round_trip(self):
        """Encrypting then decrypting restores the burst."""
        cipher = A52Cipher(SAMPLE_KEY)
        burst = bytes(range(0x40, 0x40 + BURST_BYTES))
        for direction in Direction:
            encrypted = cipher.encrypt_burst(0x134, burst, direction)
            assert encrypted != burst
            assert cipher.decrypt_burst(0x134, encrypted, direction) == burst

    def test_zero_burst_gives_keystream(self):
        """Encrypting zeros exposes the keystream."""
        cipher = A52Cipher(SAMPLE_KEY)
        a, b = generate_keystreams(SAMPLE_KEY, 0x134)
        assert cipher.encrypt_burst(0x134, bytes(BURST_BYTES)) == a
        assert cipher.encrypt_burst(0x134, bytes(BURST_BYTES), Direction.B_TO_A) == b

    def test_padding_bits_pass_through(self):
        cipher = A52Cipher(SAMPLE_KEY)
        burst = b"\x00" * 14 + b"\x3f"
        assert cipher.encrypt_burst(5, burst)[-1] & 0x3F == 0x3F

    def test_wrong_burst_size(self):
        cipher = A52Cipher(SAMPLE_KEY)
        with pytest.raises(ValueError):
            cipher.encrypt_burst(0, bytes(14))

    def test_bit_list_round_trip(self):
        cipher = A52Cipher(SAMPLE_KEY)
        bits = [i % 2 for i in range(BURST_BITS)]
        encrypted = cipher.encrypt_burst_bits(9, bits, Direction.B_TO_A)
        assert len(encrypted) == BURST_BITS
        assert cipher.encrypt_burst_bits(9, encrypted, Direction.B_TO_A) == bits

    def test_keystream_bits_match_bytes(self):
        cipher = A52Cipher(SAMPLE_KEY)
        bits = cipher.keystream_bits(3, Direction.B_TO_A)
        packed = cipher.keystream(3, Direction.B_TO_A)
        assert bits[:8] == [(packed[0] >> (7 - i)) & 1 for i in range(8)]

    def test_from_hex_accepts_spaces(self):
        cipher = A52Cipher.from_hex("00 fc ff ff ff ff ff ff", taps=REFERENCE_OUTPUT_TAPS)
        assert cipher.key_fingerprint == key_fingerprint(REFERENCE_KEY)
        assert "reference" in repr(cipher)

    def test_xor_bytes_short_keystream(self):
        with pytest.raises(ValueError):
            xor_bytes(b"abc", b"ab")


class TestEventLogging:
    """Cipher operations recorded to the audit log."""

    def test_cipher_events_recorded(self):
        logger = EventLogger()
        cipher = A52Cipher(SAMPLE_KEY, logger=logger)
        cipher.keystreams(0x134)
        cipher.encrypt_burst(0x134, bytes(BURST_BYTES), Direction.B_TO_A)
        cipher.decrypt_burst(0x134, bytes(BURST_BYTES))

        types = [e.event_type for e in logger.get_all_events()]
        assert types == [
            EventType.KEY_SETUP,
            EventType.KEYSTREAM_GENERATED,
            EventType.BURST_ENCRYPT,
            EventType.BURST_DECRYPT,
        ]
        burst = logger.get_events_by_type(EventType.BURST_ENCRYPT)[0]
        assert burst.details == {'frame': 0x134, 'direction': 'B_TO_A'}

    def test_frame_logged_truncated(self):
        logger = EventLogger()
        generate_keystreams(SAMPLE_KEY, 0x400134, logger=logger)
        event = logger.get_events_by_type(EventType.KEYSTREAM_GENERATED)[0]
        assert event.details['frame'] == 0x134
        assert event.key_id == key_fingerprint(SAMPLE_KEY)

    def test_rejected_key_in_cipher_constructor(self):
        logger = create_event_logger()
        with pytest.raises(ValueError):
            A52Cipher(bytes(4), logger=logger)
        assert logger.get_events_by_type(EventType.KEY_REJECTED)

    def test_chain_valid(self):
        logger = EventLogger()
        cipher = A52Cipher(SAMPLE_KEY, logger=logger)
        for frame in range(5):
            cipher.keystreams(frame)
        assert logger.length == 6
        assert logger.verify_integrity()

    def test_tampering_detected(self):
        """Editing a logged event breaks the chain."""
        logger = EventLogger()
        cipher = A52Cipher(SAMPLE_KEY, logger=logger)
        cipher.keystreams(1)
        cipher.keystreams(2)
        logger.get_all_events()[1].details['frame'] = 99
        assert not logger.verify_integrity()

    def test_removed_event_detected(self):
        logger = EventLogger()
        cipher = A52Cipher(SAMPLE_KEY, logger=logger)
        cipher.keystreams(1)
        cipher.keystreams(2)
        events = logger.get_all_events()
        assert not EventLogger(events=[events[0], events[2]]).verify_integrity()

    def test_export_import(self):
        logger = EventLogger()
        cipher = A52Cipher(SAMPLE_KEY, logger=logger)
        cipher.keystreams(7)
        imported = EventLogger.import_log(logger.export_log())
        assert imported.length == logger.length
        assert imported.verify_integrity()
        assert [e.record_hash for e in imported.get_all_events()] == \
            [e.record_hash for e in logger.get_all_events()]

    def test_callbacks(self):
        logger = EventLogger()
        seen = []
        logger.add_callback(seen.append)
        cipher = A52Cipher(SAMPLE_KEY, logger=logger)
        logger.remove_callback(seen.append)
        cipher.keystreams(1)
        assert len(seen) == 1
        assert isinstance(seen[0], CipherEvent)

    def test_key_events_and_recent(self):
        logger = EventLogger()
        A52Cipher(SAMPLE_KEY, logger=logger).keystreams(1)
        A52Cipher(REFERENCE_KEY, logger=logger).keystreams(1)
        assert len(logger.get_key_events(key_fingerprint(SAMPLE_KEY))) == 2
        assert len(logger.get_recent_events(3)) == 3


class TestDemo:
    """The demo entry point."""

    def test_main_prints_reference_vector(self, capsys):
        assert demo.main() == 0
        out = capsys.readouterr().out
        assert "f4512cac13593764460b722dadd500" in out
        assert "4800d4328e16a14dcd7b9722265100" in out
        assert "Round trip: OK" in out
        assert "Chain valid: True" in out
