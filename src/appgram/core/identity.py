"""
Anonymous identity for vote de-duplication.

The identity token ("fingerprint") lets the backend recognise repeat votes
from the same installation without an account. It combines:
1. A fast non-cryptographic hash of coarse device characteristics
2. A base-36 millisecond timestamp
3. A short suffix read from a secure random source

The hash is a de-duplication heuristic only. A determined user can produce a
new token at will; that is an accepted limitation.
"""

import locale
import os
import platform
import secrets
import time
from typing import Optional

import structlog
from pydantic import BaseModel

from appgram.core.config import settings
from appgram.core.storage import KeyValueStorage

logger = structlog.get_logger(__name__)

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
RANDOM_SUFFIX_BYTES = 6
RANDOM_SUFFIX_LENGTH = 10


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def simple_hash(text: str) -> str:
    """
    32-bit rolling string hash (h * 31 + unit), rendered as abs() in base 36.

    Operates on UTF-16 code units so tokens match those produced by browser
    clients for the same input.
    """
    h = 0
    encoded = text.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return to_base36(abs(h))


class DeviceCharacteristics(BaseModel):
    """Coarse, low-entropy attributes of the current installation."""

    user_agent: str
    language: str
    color_depth: int = 0
    screen_width: int = 0
    screen_height: int = 0
    timezone_offset: int = 0  # Minutes, positive west of UTC
    hardware_concurrency: int = 0
    device_memory: float = 0

    def signature(self) -> str:
        """Join attributes in a fixed order."""
        return "|".join(
            [
                self.user_agent,
                self.language,
                str(self.color_depth),
                str(self.screen_width),
                str(self.screen_height),
                str(self.timezone_offset),
                str(self.hardware_concurrency),
                str(self.device_memory),
            ]
        )

    @classmethod
    def from_environment(cls) -> "DeviceCharacteristics":
        """Collect characteristics from the host process."""
        user_agent = (
            f"{settings.user_agent} ({platform.system()} {platform.release()}; "
            f"{platform.machine()}) Python/{platform.python_version()}"
        )
        language = locale.getlocale()[0] or "en_US"
        gmtoff = time.localtime().tm_gmtoff or 0
        return cls(
            user_agent=user_agent,
            language=language.replace("_", "-"),
            timezone_offset=-(gmtoff // 60),
            hardware_concurrency=os.cpu_count() or 0,
        )


def generate_fingerprint(characteristics: DeviceCharacteristics) -> str:
    """Synthesize a fresh identity token."""
    timestamp = to_base36(int(time.time() * 1000))
    random_bytes = secrets.token_bytes(RANDOM_SUFFIX_BYTES)
    suffix = "".join(to_base36(b) for b in random_bytes)[:RANDOM_SUFFIX_LENGTH]
    return f"{simple_hash(characteristics.signature())}-{timestamp}-{suffix}"


class IdentityProvider:
    """
    Owner of the identity token.

    Create one instance at application start and share it. The token is read
    from storage once, memoized, and only replaced through reset_fingerprint().
    Storage errors are logged and swallowed: when persistence fails the token
    lives in memory for the lifetime of this instance and the write is not
    retried.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        characteristics: Optional[DeviceCharacteristics] = None,
        storage_key: Optional[str] = None,
    ):
        self.storage = storage
        self.storage_key = storage_key or settings.FINGERPRINT_STORAGE_KEY
        self._characteristics = characteristics
        self._token: Optional[str] = None
        self.is_persisted = False

    @property
    def characteristics(self) -> DeviceCharacteristics:
        if self._characteristics is None:
            self._characteristics = DeviceCharacteristics.from_environment()
        return self._characteristics

    def get_fingerprint(self) -> str:
        """Return the persisted token, creating and persisting one if needed."""
        if self._token:
            return self._token

        stored: Optional[str] = None
        try:
            stored = self.storage.get_item(self.storage_key)
        except Exception as e:
            logger.warning("fingerprint_storage_read_failed", error=str(e))

        if stored:
            self._token = stored
            self.is_persisted = True
            return stored

        token = generate_fingerprint(self.characteristics)
        try:
            self.storage.set_item(self.storage_key, token)
            self.is_persisted = True
        except Exception as e:
            self.is_persisted = False
            logger.warning("fingerprint_storage_write_failed", error=str(e), backend="in_memory")

        self._token = token
        logger.info("fingerprint_created", fingerprint=token[:8], persisted=self.is_persisted)
        return token

    def reset_fingerprint(self) -> None:
        """Forget the token; the next get_fingerprint() call creates a new one."""
        self._token = None
        self.is_persisted = False
        try:
            self.storage.remove_item(self.storage_key)
        except Exception as e:
            logger.warning("fingerprint_storage_remove_failed", error=str(e))
