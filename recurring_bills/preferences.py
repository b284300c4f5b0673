"""Per-user display currency preference, persisted to a JSON file.

The stored preference is best-effort: a missing or unreadable file
falls back to the default currency rather than failing the session.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Dict

from .formatting import CURRENCIES, DEFAULT_CURRENCY_CODE, Currency, get_currency

logger = logging.getLogger(__name__)


def _key(user_id: str) -> str:
    return f"selectedCurrency_{user_id}"


class CurrencyPreferenceStore:
    """Reads and writes ``selectedCurrency_<user id>`` entries."""

    def __init__(self, path: str, default_code: str = DEFAULT_CURRENCY_CODE):
        self.path = path
        self.default = get_currency(default_code)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _load(self) -> Dict[str, str]:
        try:
            return self._read()
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}

    def get(self, user_id: str) -> Currency:
        code = self._load().get(_key(user_id))
        return CURRENCIES.get(code, self.default) if code else self.default

    def set(self, user_id: str, code: str) -> Currency:
        """Store the user's currency choice.

        The file is rewritten under a lock and swapped into place with
        ``os.replace``, so readers never see a partial file. An existing
        file that cannot be parsed is kept as ``<path>.corrupt``.

        Raises:
            ValueError: If the currency code is not supported.
        """
        currency = get_currency(code)
        directory = os.path.dirname(os.path.abspath(self.path))
        with self._lock:
            try:
                data = self._read()
            except ValueError as e:
                logger.warning(f"Preferences file {self.path} is corrupt, moving it aside: {e}")
                os.replace(self.path, self.path + ".corrupt")
                data = {}
            data[_key(user_id)] = currency.code

            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
            except Exception:
                os.unlink(temp_path)
                raise
            os.replace(temp_path, self.path)
        logger.info(f"Saved display currency {currency.code} for user {user_id}")
        return currency
