"""
gsmcipher - Main Entry Point
Short demonstration of the A5/2 keystream generator.
"""

from .core_crypto.a52_cipher import (
    A52Cipher, Direction, REFERENCE_OUTPUT_TAPS, BURST_BYTES
)
from .integration.event_logger import EventLogger


# Published test vector of the pedagogical A5/2 implementation
REFERENCE_KEY = "00fcffffffffffff"
REFERENCE_FRAME = 0x21


def main():
    """Main entry point for gsmcipher."""
    print("=" * 50)
    print("gsmcipher - A5/2 keystream generator")
    print("=" * 50)

    logger = EventLogger()
    cipher = A52Cipher.from_hex(REFERENCE_KEY, taps=REFERENCE_OUTPUT_TAPS, logger=logger)
    a_to_b, b_to_a = cipher.keystreams(REFERENCE_FRAME)
    print(f"\nKey:   {REFERENCE_KEY}")
    print(f"Frame: 0x{REFERENCE_FRAME:x}")
    print(f"A->B:  {a_to_b.hex()}")
    print(f"B->A:  {b_to_a.hex()}")

    burst = bytes(range(BURST_BYTES))
    encrypted = cipher.encrypt_burst(REFERENCE_FRAME, burst, Direction.B_TO_A)
    decrypted = cipher.decrypt_burst(REFERENCE_FRAME, encrypted, Direction.B_TO_A)
    print(f"\nBurst:     {burst.hex()}")
    print(f"Encrypted: {encrypted.hex()}")
    print(f"Round trip: {'OK' if decrypted == burst else 'FAILED'}")

    logger.print_audit_log()
    return 0


if __name__ == "__main__":
    main()
