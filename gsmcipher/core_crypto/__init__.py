# Core Cryptography Module
"""
A5/2 cipher implementation:
- Register state and constants
- Majority clock control
- Delayed non-linear output function
- Key/frame loading
- Keystream engine and burst encryption
- Bit helpers and GSM COUNT mapping
"""
