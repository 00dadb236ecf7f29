# gsmcipher
"""
A5/2 keystream generator for GSM bursts.

Modules:
- core_crypto: register state, clocking, output function, key/frame
  loading, keystream engine, burst encryption
- integration: hash-chained audit logging of cipher events
"""

from .core_crypto.a52_cipher import (
    A52Cipher,
    Direction,
    InvalidKeyLength,
    generate_keystreams,
)

__version__ = "0.1.0"

__all__ = [
    'A52Cipher',
    'Direction',
    'InvalidKeyLength',
    'generate_keystreams',
]
