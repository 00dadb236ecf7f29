"""
A5/2 Stream Cipher

The GSM A5/2 keystream generator: four LFSRs with irregular clocking,
a non-linear output function and a one-cycle output delay. A 64-bit key
and a 22-bit frame number produce two 114-bit keystreams, one per
direction of a duplex link.

This is for EDUCATIONAL/INTEROPERABILITY purposes only - A5/2 is broken
and can be recovered from ciphertext alone in real time.

Components:
- RegisterState: R1..R4 plus the delay bit (one instance per key setup)
- clock: majority clock control driven by R4
- output_bit: non-linear combination, delayed by one cycle
- setup: key/frame loading and 100 mixing cycles
- run: 2 x 114 cycles of keystream output
- A52Cipher: keyed object with burst encryption helpers

Bit order:
    Key bits are loaded LSB first within each byte, bytes 0..7.
    Frame bits are loaded LSB first.
    Output bits are packed MSB first, in generation order.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Tuple

from cryptography.hazmat.primitives import hashes

from .bits import parity, majority, get_bit, key_bits, pack_bits, unpack_bits


# ============================================================================
# Constants
# ============================================================================

KEY_SIZE = 8                # Key length in bytes
KEY_BITS = 64
FRAME_BITS = 22
FRAME_MASK = (1 << FRAME_BITS) - 1
MIX_CYCLES = 100            # Blind cycles after loading
BURST_BITS = 114            # Keystream bits per direction
BURST_BYTES = (BURST_BITS + 7) // 8  # 15

# Register masks
R1_MASK = 0x07FFFF  # 19 bits, numbered 0..18
R2_MASK = 0x3FFFFF  # 22 bits, numbered 0..21
R3_MASK = 0x7FFFFF  # 23 bits, numbered 0..22
R4_MASK = 0x01FFFF  # 17 bits, numbered 0..16

# Clocking bits of R4
R4_TAP1 = 0x000400  # bit 10, controls R1
R4_TAP2 = 0x000008  # bit 3, controls R2
R4_TAP3 = 0x000080  # bit 7, controls R3

# Feedback taps
R1_TAPS = 0x072000  # bits 18,17,16,13
R2_TAPS = 0x300000  # bits 21,20
R3_TAPS = 0x700080  # bits 22,21,20,7
R4_TAPS = 0x010800  # bits 16,11

# Bits forced to 1 while the last frame bit is clocked in
R1_LOADED_BIT = 1 << 15
R2_LOADED_BIT = 1 << 16
R3_LOADED_BIT = 1 << 18
R4_LOADED_BIT = 1 << 10


# ============================================================================
# Errors
# ============================================================================

class InvalidKeyLength(ValueError):
    """Raised when a key is not exactly 64 bits."""

    def __init__(self, length: int, unit: str = "bytes"):
        self.length = length
        self.unit = unit
        expected = KEY_SIZE if unit == "bytes" else KEY_BITS
        super().__init__(
            f"A5/2 key must be {expected} {unit}, got {length} {unit}"
        )


# ============================================================================
# Register State
# ============================================================================

@dataclass
class RegisterState:
    """
    Complete A5/2 cipher state.

    Mutated in place by clock() and output_bit(). A new instance is built
    by every setup() call so independent key/frame pairs never share state.
    """
    r1: int = 0
    r2: int = 0
    r3: int = 0
    r4: int = 0
    delay_bit: int = 0

    def copy(self) -> 'RegisterState':
        """Independent snapshot of the current state."""
        return replace(self)

    def __repr__(self) -> str:
        return (
            f"RegisterState(r1=0x{self.r1:05x}, r2=0x{self.r2:06x}, "
            f"r3=0x{self.r3:06x}, r4=0x{self.r4:05x}, "
            f"delay_bit={self.delay_bit})"
        )


# (bit position, complemented) for each input of a majority term
MajorityTerm = Tuple[Tuple[int, bool], Tuple[int, bool], Tuple[int, bool]]


@dataclass(frozen=True)
class OutputTaps:
    """
    Register bits feeding the non-linear part of the output function.

    Each register contributes majority(b1, b2, b3) where some inputs are
    complemented. Two profiles are provided, see DEFAULT_OUTPUT_TAPS and
    REFERENCE_OUTPUT_TAPS.
    """
    name: str
    r1: MajorityTerm
    r2: MajorityTerm
    r3: MajorityTerm

    @staticmethod
    def _term(reg: int, term: MajorityTerm) -> int:
        inputs = [get_bit(~reg if inverted else reg, pos) for pos, inverted in term]
        return majority(*inputs)

    def combine(self, state: RegisterState) -> int:
        """XOR of the three majority terms for the given state."""
        return (
            self._term(state.r1, self.r1)
            ^ self._term(state.r2, self.r2)
            ^ self._term(state.r3, self.r3)
        )


DEFAULT_OUTPUT_TAPS = OutputTaps(
    name="default",
    r1=((15, False), (14, True), (12, False)),
    r2=((16, True), (14, False), (12, False)),
    r3=((18, False), (16, False), (13, True)),
)

# Tap set of the published pedagogical implementation; the one that
# reproduces its test vector.
REFERENCE_OUTPUT_TAPS = OutputTaps(
    name="reference",
    r1=((15, False), (14, True), (12, False)),
    r2=((16, True), (13, False), (9, False)),
    r3=((18, False), (16, False), (13, True)),
)


# ============================================================================
# Clock Controller
# ============================================================================

def clock_register(reg: int, mask: int, taps: int, loaded_bit: int = 0) -> int:
    """
    Advance one shift register by a single step.

    Args:
        reg: Current register value
        mask: Register width mask
        taps: Feedback tap mask
        loaded_bit: Bit forced to 1 on this step (0 for none)

    Returns:
        New register value
    """
    feedback = parity(reg & taps)
    reg = (reg << 1) & mask
    return reg | feedback | loaded_bit


def clock(state: RegisterState, force_all: bool = False,
          load_last_bit: bool = False) -> RegisterState:
    """
    Clock the registers under R4's majority control.

    R1, R2 and R3 each advance when their controlling bit of R4 agrees
    with the majority of the three controlling bits, or unconditionally
    when force_all is set (key loading only). R4 always advances.

    Args:
        state: State to advance (mutated in place)
        force_all: Clock every register regardless of R4
        load_last_bit: Last frame bit is being loaded; force the
            per-register special bit to 1

    Returns:
        The same state object
    """
    c1 = state.r4 & R4_TAP1
    c2 = state.r4 & R4_TAP2
    c3 = state.r4 & R4_TAP3
    maj = majority(c1, c2, c3)
    loaded = 1 if load_last_bit else 0

    if force_all or (c1 != 0) == maj:
        state.r1 = clock_register(state.r1, R1_MASK, R1_TAPS, loaded * R1_LOADED_BIT)
    if force_all or (c2 != 0) == maj:
        state.r2 = clock_register(state.r2, R2_MASK, R2_TAPS, loaded * R2_LOADED_BIT)
    if force_all or (c3 != 0) == maj:
        state.r3 = clock_register(state.r3, R3_MASK, R3_TAPS, loaded * R3_LOADED_BIT)
    state.r4 = clock_register(state.r4, R4_MASK, R4_TAPS, loaded * R4_LOADED_BIT)
    return state


# ============================================================================
# Output Generator
# ============================================================================

def output_bit(state: RegisterState,
               taps: OutputTaps = DEFAULT_OUTPUT_TAPS) -> int:
    """
    Produce one keystream bit.

    The value returned is the one computed on the previous call; the
    freshly computed value is held in state.delay_bit for the next call.
    """
    topbits = ((state.r1 >> 18) ^ (state.r2 >> 21) ^ (state.r3 >> 22)) & 1
    now = state.delay_bit
    state.delay_bit = topbits ^ taps.combine(state)
    return now


# ============================================================================
# Key/Frame Loader
# ============================================================================

def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise TypeError(f"Key must be bytes-like, got {type(key).__name__}")
    key = bytes(key)
    if len(key) != KEY_SIZE:
        raise InvalidKeyLength(len(key))
    return key


def _load_bit(state: RegisterState, bit: int) -> None:
    state.r1 ^= bit
    state.r2 ^= bit
    state.r3 ^= bit
    state.r4 ^= bit


def setup(key: bytes, frame: int,
          taps: OutputTaps = DEFAULT_OUTPUT_TAPS) -> RegisterState:
    """
    Build the ready-to-run state for a (key, frame) pair.

    Args:
        key: 8-byte key
        frame: Frame number; only the low 22 bits are used
        taps: Output tap profile (used for the priming output call)

    Returns:
        Fresh RegisterState with the delay bit primed

    Raises:
        InvalidKeyLength: If key is not 8 bytes
        TypeError: If key is not bytes-like
    """
    key = _check_key(key)
    state = RegisterState()

    # Key bits, clock control disabled
    for bit in key_bits(key):
        clock(state, force_all=True)
        _load_bit(state, bit)

    # Frame bits; the last one forces the special bits
    for i in range(FRAME_BITS):
        clock(state, force_all=True, load_last_bit=(i == FRAME_BITS - 1))
        _load_bit(state, (frame >> i) & 1)

    for _ in range(MIX_CYCLES):
        clock(state)

    # Prime the delay pipeline without using up a keystream position
    output_bit(state, taps)
    return state


# ============================================================================
# Keystream Engine
# ============================================================================

def _run_bits(state: RegisterState, taps: OutputTaps) -> Tuple[List[int], List[int]]:
    streams = []
    for _ in range(2):
        bits = []
        for _ in range(BURST_BITS):
            clock(state)
            bits.append(output_bit(state, taps))
        streams.append(bits)
    return streams[0], streams[1]


def run(state: RegisterState,
        taps: OutputTaps = DEFAULT_OUTPUT_TAPS) -> Tuple[bytes, bytes]:
    """
    Generate both 114-bit keystreams from a prepared state.

    The second stream continues from where the first one left the
    registers.

    Returns:
        (A->B keystream, B->A keystream), 15 bytes each, MSB first
    """
    a_bits, b_bits = _run_bits(state, taps)
    return pack_bits(a_bits), pack_bits(b_bits)


def generate_keystreams(key: bytes, frame_number: int,
                        taps: OutputTaps = DEFAULT_OUTPUT_TAPS,
                        logger=None) -> Tuple[bytes, bytes]:
    """
    Run setup and keystream generation for one frame.

    Args:
        key: 8-byte key
        frame_number: Frame counter (low 22 bits used)
        taps: Output tap profile
        logger: Optional EventLogger receiving audit events

    Returns:
        (A->B keystream, B->A keystream), 15 bytes each

    Raises:
        InvalidKeyLength: If key is not 8 bytes
    """
    try:
        state = setup(key, frame_number, taps)
    except InvalidKeyLength as e:
        if logger is not None:
            logger.log_key_rejected(e.length, e.unit)
        raise
    streams = run(state, taps)
    if logger is not None:
        logger.log_keystream(key_fingerprint(key), frame_number & FRAME_MASK, taps.name)
    return streams


def generate_keystream_bits(key: bytes, frame_number: int,
                            taps: OutputTaps = DEFAULT_OUTPUT_TAPS
                            ) -> Tuple[List[int], List[int]]:
    """Like generate_keystreams, but returns two lists of 114 bits."""
    return _run_bits(setup(key, frame_number, taps), taps)


def a52_gsm(key: bytes, key_bits_len: int, count: int,
            taps: OutputTaps = DEFAULT_OUTPUT_TAPS) -> Tuple[bytes, bytes]:
    """
    GSM-style entry point taking the key length in bits.

    Args:
        key: Key bytes
        key_bits_len: Declared key length in bits (must be 64)
        count: 22-bit COUNT / frame value

    Returns:
        (block1, block2) keystreams
    """
    if key_bits_len != KEY_BITS:
        raise InvalidKeyLength(key_bits_len, unit="bits")
    return generate_keystreams(key, count, taps)


# ============================================================================
# Cipher object
# ============================================================================

class Direction(Enum):
    """Link direction; selects which of the two keystreams is used."""
    A_TO_B = 0
    B_TO_A = 1


def key_fingerprint(key: bytes) -> str:
    """
    Short identifier for a key, safe to log.

    Returns:
        First 16 hex characters of SHA-256(key)
    """
    digest = hashes.Hash(hashes.SHA256())
    digest.update(bytes(key))
    return digest.finalize().hex()[:16]


def xor_bytes(data: bytes, keystream: bytes) -> bytes:
    """
    XOR data with a keystream.

    Raises:
        ValueError: If the keystream is shorter than the data
    """
    if len(keystream) < len(data):
        raise ValueError("Keystream must be at least as long as data")
    return bytes(d ^ k for d, k in zip(data, keystream))


class A52Cipher:
    """
    A5/2 cipher bound to one key.

    Every call builds its own RegisterState, so a single instance can be
    shared between threads and used for any number of frames.

    Example:
        >>> cipher = A52Cipher(bytes.fromhex("00fcffffffffffff"),
        ...                    taps=REFERENCE_OUTPUT_TAPS)
        >>> cipher.keystream(0x21, Direction.A_TO_B).hex()
        'f4512cac13593764460b722dadd500'
    """

    def __init__(self, key: bytes, taps: OutputTaps = DEFAULT_OUTPUT_TAPS,
                 logger=None):
        """
        Args:
            key: 8-byte key
            taps: Output tap profile
            logger: Optional EventLogger

        Raises:
            InvalidKeyLength: If key is not 8 bytes
        """
        try:
            self._key = _check_key(key)
        except InvalidKeyLength as e:
            if logger is not None:
                logger.log_key_rejected(e.length, e.unit)
            raise
        self._taps = taps
        self._logger = logger
        self._fingerprint = key_fingerprint(self._key)
        if logger is not None:
            logger.log_key_setup(self._fingerprint, taps.name)

    @classmethod
    def from_hex(cls, key_hex: str, taps: OutputTaps = DEFAULT_OUTPUT_TAPS,
                 logger=None) -> 'A52Cipher':
        """Create a cipher from a hex key string (spaces allowed)."""
        try:
            key = bytes.fromhex(key_hex)
        except ValueError:
            raise ValueError(f"Invalid hex key: {key_hex!r}") from None
        return cls(key, taps=taps, logger=logger)

    @property
    def taps(self) -> OutputTaps:
        return self._taps

    @property
    def key_fingerprint(self) -> str:
        """SHA-256 based fingerprint of the key."""
        return self._fingerprint

    def keystreams(self, frame: int) -> Tuple[bytes, bytes]:
        """Both keystreams for a frame."""
        return generate_keystreams(self._key, frame, self._taps, self._logger)

    def keystream(self, frame: int, direction: Direction = Direction.A_TO_B) -> bytes:
        """Keystream for one direction of a frame."""
        return self.keystreams(frame)[direction.value]

    def keystream_bits(self, frame: int,
                       direction: Direction = Direction.A_TO_B) -> List[int]:
        return generate_keystream_bits(self._key, frame, self._taps)[direction.value]

    def _xor_burst(self, frame: int, payload: bytes, direction: Direction,
                   encrypt: bool) -> bytes:
        if len(payload) != BURST_BYTES:
            raise ValueError(
                f"Burst payload must be {BURST_BYTES} bytes ({BURST_BITS} bits), "
                f"got {len(payload)}"
            )
        ks = generate_keystreams(self._key, frame, self._taps)[direction.value]
        if self._logger is not None:
            self._logger.log_burst(
                self._fingerprint, frame & FRAME_MASK, direction.name, encrypt
            )
        return xor_bytes(bytes(payload), ks)

    def encrypt_burst(self, frame: int, payload: bytes,
                      direction: Direction = Direction.A_TO_B) -> bytes:
        """
        Encrypt a 114-bit burst payload (15 bytes, MSB first).

        The 6 padding bits of the last byte pass through unchanged since
        the keystream is zero there.

        Raises:
            ValueError: If payload is not 15 bytes
        """
        return self._xor_burst(frame, payload, direction, True)

    def decrypt_burst(self, frame: int, payload: bytes,
                      direction: Direction = Direction.A_TO_B) -> bytes:
        """Decrypt a burst; identical to encryption."""
        return self._xor_burst(frame, payload, direction, False)

    def encrypt_burst_bits(self, frame: int, payload_bits: List[int],
                           direction: Direction = Direction.A_TO_B) -> List[int]:
        """Encrypt a burst given as a list of 114 bits."""
        if len(payload_bits) != BURST_BITS:
            raise ValueError(f"Burst must be {BURST_BITS} bits, got {len(payload_bits)}")
        packed = self.encrypt_burst(frame, pack_bits(payload_bits), direction)
        return unpack_bits(packed, BURST_BITS)

    def __repr__(self) -> str:
        return f"A52Cipher(key_id={self._fingerprint}, taps={self._taps.name!r})"
