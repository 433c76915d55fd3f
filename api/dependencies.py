import math
import os
import secrets
import threading
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional

from fastapi import Request

from api.errors import ApiError
from api.models import BotConfiguration, BotRecord, WebhookAlert


def env_true(name: str, default: str = 'false') -> bool:
    return str(os.getenv(name, default)).strip().lower() in ('1', 'true', 'yes', 'y', 'on')


@dataclass(frozen=True)
class Settings:
    simulation_mode: bool = False
    default_position_size: float = 0.01
    log_level: str = 'INFO'

    def __post_init__(self):
        if not (math.isfinite(self.default_position_size) and self.default_position_size > 0):
            raise ValueError(f"DEFAULT_POSITION_SIZE must be a positive number, got {self.default_position_size}")


def load_settings() -> Settings:
    # Read once at startup and handed to create_app()
    raw_size = os.getenv('DEFAULT_POSITION_SIZE', '0.01')
    try:
        default_position_size = float(raw_size)
    except ValueError:
        raise ValueError(f"DEFAULT_POSITION_SIZE must be a positive number, got {raw_size!r}") from None
    return Settings(
        simulation_mode=env_true('SIMULATION_MODE'),
        default_position_size=default_position_size,
        log_level=os.getenv('LOG_LEVEL', 'INFO'),
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)


MAX_SIGNALS = 1000


class BotStore:
    """In-memory persistence for bots and the signals received for them."""

    def __init__(self, default_position_size: float = 0.01, max_signals: int = MAX_SIGNALS):
        self.default_position_size = default_position_size
        self._bots: Dict[str, BotRecord] = {}
        # Oldest signals are dropped once the log is full
        self._signals: Deque[dict] = deque(maxlen=max_signals)
        self._lock = threading.Lock()

    def list_bots(self) -> List[BotRecord]:
        with self._lock:
            return sorted(self._bots.values(), key=lambda b: b.created_at, reverse=True)

    def get_bot(self, bot_id: str) -> BotRecord:
        with self._lock:
            bot = self._bots.get(bot_id.strip())
        if bot is None:
            raise ApiError("Bot not found", 404)
        return bot

    def create_bot(self, config: BotConfiguration) -> BotRecord:
        now = _now()
        bot = BotRecord(
            id=str(uuid.uuid4()),
            webhook_secret=secrets.token_hex(32),
            created_at=now,
            updated_at=now,
            **self._fields(config),
        )
        with self._lock:
            self._bots[bot.id] = bot
        return bot

    def replace_bot(self, bot_id: str, config: BotConfiguration) -> BotRecord:
        return self._update(bot_id, **self._fields(config))

    def set_enabled(self, bot_id: str, enabled: bool) -> BotRecord:
        return self._update(bot_id, enabled=enabled)

    def rotate_webhook_secret(self, bot_id: str) -> BotRecord:
        return self._update(bot_id, webhook_secret=secrets.token_hex(32))

    def delete_bot(self, bot_id: str):
        bot = self.get_bot(bot_id)
        with self._lock:
            self._bots.pop(bot.id, None)

    def record_signal(self, alert: WebhookAlert, status: str, order: Optional[dict] = None) -> dict:
        signal = {
            'id': str(uuid.uuid4()),
            'bot_id': alert.bot_id,
            'alert': alert.model_dump(exclude_none=True),
            'status': status,
            'order': order,
            'received_at': _now(),
        }
        with self._lock:
            self._signals.append(signal)
        return signal

    def signals(self, bot_id: str = None) -> List[dict]:
        """Signals received for `bot_id` (or every bot), newest first."""
        with self._lock:
            return [s for s in reversed(self._signals) if bot_id is None or s['bot_id'] == bot_id]

    def _update(self, bot_id: str, **changes) -> BotRecord:
        current = self.get_bot(bot_id)
        bot = current.model_copy(update={**changes, 'updated_at': _now()})
        with self._lock:
            self._bots[bot.id] = bot
        return bot

    def _fields(self, config: BotConfiguration) -> dict:
        fields = config.model_dump()
        if fields['max_position_size'] is None:
            fields['max_position_size'] = self.default_position_size
        return fields


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_bot_store(request: Request) -> BotStore:
    return request.app.state.bot_store
