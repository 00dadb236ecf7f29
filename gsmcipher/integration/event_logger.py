"""
Event Logger Module

Audit trail for cipher usage. The cipher functions accept an optional
EventLogger and report key setups, keystream generation, rejected keys
and burst encryption to it.

Features:
- Key fingerprints only (SHA-256 prefix), never key material
- Hash-chained events: each record commits to the previous one
- Callbacks for live monitoring
- JSON export/import

Author: gsmcipher project
"""

import hashlib
import json
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


# ============================================================================
# Constants
# ============================================================================

EVENT_VERSION = "1.0"
GENESIS_HASH = "0" * 64


# ============================================================================
# Event Types
# ============================================================================

class EventType(Enum):
    """Types of cipher events that can be logged."""

    KEY_SETUP = "key_setup"
    KEY_REJECTED = "key_rejected"
    KEYSTREAM_GENERATED = "keystream_generated"
    BURST_ENCRYPT = "burst_encrypt"
    BURST_DECRYPT = "burst_decrypt"


# ============================================================================
# Event Structure
# ============================================================================

@dataclass
class CipherEvent:
    """
    One logged cipher event.

    prev_hash links the event to its predecessor; record_hash covers the
    event body plus prev_hash.
    """
    event_type: EventType
    key_id: str  # key fingerprint, or "-" when no valid key exists
    timestamp: int
    details: Dict[str, Any] = field(default_factory=dict)
    prev_hash: str = GENESIS_HASH
    record_hash: str = ""

    def body(self) -> str:
        """Canonical JSON of the hashed fields."""
        return json.dumps({
            'version': EVENT_VERSION,
            'type': self.event_type.value,
            'key': self.key_id,
            'time': self.timestamp,
            'details': self.details,
        }, separators=(',', ':'), sort_keys=True)

    def compute_hash(self) -> str:
        return hashlib.sha256((self.prev_hash + self.body()).encode()).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.event_type.value,
            'key': self.key_id,
            'time': self.timestamp,
            'iso_time': datetime.fromtimestamp(self.timestamp).isoformat(),
            'details': self.details,
            'prev_hash': self.prev_hash,
            'hash': self.record_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CipherEvent':
        return cls(
            event_type=EventType(data['type']),
            key_id=data['key'],
            timestamp=data['time'],
            details=data.get('details', {}),
            prev_hash=data['prev_hash'],
            record_hash=data['hash'],
        )

    def __str__(self) -> str:
        dt = datetime.fromtimestamp(self.timestamp)
        return (
            f"[{dt.strftime('%Y-%m-%d %H:%M:%S')}] "
            f"{self.event_type.value} | key:{self.key_id}"
        )


# ============================================================================
# Event Logger
# ============================================================================

class EventLogger:
    """
    Hash-chained event log for cipher operations.

    Safe to share between threads; appends are serialized by a lock.
    """

    def __init__(self, events: Optional[List[CipherEvent]] = None):
        """
        Initialize the event logger.

        Args:
            events: Optional existing events (already chained)
        """
        self._events: List[CipherEvent] = list(events or [])
        self._callbacks: List[Callable[[CipherEvent], None]] = []
        self._lock = threading.Lock()

    def _add_event(self, event_type: EventType, key_id: str,
                   details: Optional[Dict[str, Any]] = None) -> CipherEvent:
        """Chain and append a new event."""
        with self._lock:
            prev = self._events[-1].record_hash if self._events else GENESIS_HASH
            event = CipherEvent(
                event_type=event_type,
                key_id=key_id,
                timestamp=int(time.time()),
                details=details or {},
                prev_hash=prev,
            )
            event.record_hash = event.compute_hash()
            self._events.append(event)
            callbacks = list(self._callbacks)

        for callback in callbacks:
            callback(event)
        return event

    def add_callback(self, callback: Callable[[CipherEvent], None]) -> None:
        """Add a callback to be notified of new events."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[CipherEvent], None]) -> None:
        """Remove a callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    # ========================================================================
    # Cipher Events
    # ========================================================================

    def log_key_setup(self, key_id: str, taps: str) -> CipherEvent:
        """Log a cipher instance being keyed."""
        return self._add_event(EventType.KEY_SETUP, key_id, {'taps': taps})

    def log_key_rejected(self, length: int, unit: str = "bytes") -> CipherEvent:
        """
        Log a rejected key.

        Only the offending length is recorded.
        """
        return self._add_event(
            EventType.KEY_REJECTED, "-", {'length': length, 'unit': unit}
        )

    def log_keystream(self, key_id: str, frame: int, taps: str) -> CipherEvent:
        """Log generation of the two keystreams for a frame."""
        return self._add_event(
            EventType.KEYSTREAM_GENERATED, key_id, {'frame': frame, 'taps': taps}
        )

    def log_burst(self, key_id: str, frame: int, direction: str,
                  encrypt: bool = True) -> CipherEvent:
        """Log a burst encryption or decryption."""
        return self._add_event(
            EventType.BURST_ENCRYPT if encrypt else EventType.BURST_DECRYPT,
            key_id,
            {'frame': frame, 'direction': direction},
        )

    # ========================================================================
    # Retrieval
    # ========================================================================

    def get_all_events(self) -> List[CipherEvent]:
        with self._lock:
            return list(self._events)

    def get_events_by_type(self, event_type: EventType) -> List[CipherEvent]:
        """Get all events of a specific type."""
        return [e for e in self.get_all_events() if e.event_type == event_type]

    def get_key_events(self, key_id: str) -> List[CipherEvent]:
        """Get all events for one key fingerprint."""
        return [e for e in self.get_all_events() if e.key_id == key_id]

    def get_recent_events(self, count: int = 10) -> List[CipherEvent]:
        """Get the most recent events."""
        events = self.get_all_events()
        return events[-count:] if len(events) > count else events

    @property
    def length(self) -> int:
        return len(self._events)

    def verify_integrity(self) -> bool:
        """
        Check the hash chain.

        Returns:
            False if any event was modified, removed or reordered
        """
        prev = GENESIS_HASH
        for event in self.get_all_events():
            if event.prev_hash != prev or event.compute_hash() != event.record_hash:
                return False
            prev = event.record_hash
        return True

    def print_audit_log(self, last_n: Optional[int] = None) -> None:
        """Print the audit log in a readable format."""
        events = self.get_all_events()
        if last_n:
            events = events[-last_n:]

        print("\n" + "=" * 70)
        print("CIPHER AUDIT LOG")
        print("=" * 70)

        for event in events:
            print(event)
            for k, v in event.details.items():
                print(f"    {k}: {v}")

        print("=" * 70)
        print(f"Total events: {self.length}")
        print(f"Chain valid: {self.verify_integrity()}")
        print("=" * 70)

    def export_log(self) -> str:
        """Export the entire audit log as JSON."""
        return json.dumps([e.to_dict() for e in self.get_all_events()], indent=2)

    @classmethod
    def import_log(cls, json_str: str) -> 'EventLogger':
        """
        Import an audit log from JSON.

        The chain is not re-validated here; call verify_integrity().
        """
        return cls(events=[CipherEvent.from_dict(d) for d in json.loads(json_str)])


# ============================================================================
# Convenience Functions
# ============================================================================

def create_event_logger() -> EventLogger:
    """Create a new, empty event logger."""
    return EventLogger()
