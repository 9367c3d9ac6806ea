"""Small helpers shared by the crypto and storage layers.

Provided:
- now_utc() -> datetime: timezone-aware current UTC time
- b64e(b: bytes) -> str / b64d(s: str) -> bytes: base64 for secret data values
- read_random(source, n) -> bytes: exactly `n` bytes from a random source
"""

from datetime import datetime, timezone
import base64
from typing import Callable


RandomSource = Callable[[int], bytes]


def now_utc() -> datetime:
	"""Return the current wall-clock time as an aware UTC datetime."""
	return datetime.now(timezone.utc)


def b64e(b: bytes) -> str:
	"""Base64-encode bytes and return an ASCII string."""
	return base64.b64encode(b).decode("ascii")


def b64d(s: str) -> bytes:
	"""Decode a base64 ASCII string into bytes.

	Raises ValueError (binascii.Error) on non-base64 input.
	"""
	return base64.b64decode(s.encode("ascii"), validate=True)


def read_random(source: RandomSource, n: int) -> bytes:
	"""Read exactly `n` bytes from `source`. Raises ValueError on a short read."""
	data = source(n)
	if not isinstance(data, (bytes, bytearray)) or len(data) != n:
		got = len(data) if isinstance(data, (bytes, bytearray)) else 0
		raise ValueError(f"random source returned {got} bytes, wanted {n}")
	return bytes(data)
