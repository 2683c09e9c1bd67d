"""Tunable bounds for the inbox aggregator and notification poller."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

from remoasset_inbox.exceptions import ConfigError

ENV_PREFIX = "REMOASSET_INBOX_"


@dataclass
class InboxConfig:
    """Request-volume and latency bounds against the mail provider.

    These are policy knobs, not correctness constraints. Every field can be
    overridden from the environment as ``REMOASSET_INBOX_<FIELD_NAME>``,
    e.g. ``REMOASSET_INBOX_MAX_LEADS=20``.
    """

    max_leads: int = 12
    threads_per_lead: int = 6
    max_merged_threads: int = 30
    metadata_batch_size: int = 15

    # Notification poller
    poll_interval: float = 30.0
    initial_poll_delay: float = 3.0
    poller_max_leads: int = 30
    lead_cache_ttl: float = 300.0
    max_notified_messages: int = 10

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> InboxConfig:
        """Build a config from defaults overridden by environment variables."""
        env = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or raw.strip() == "":
                continue
            cast = float if f.type in ("float", float) else int
            try:
                overrides[f.name] = cast(raw)
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}"
                ) from e
        config = cls(**overrides)
        config.validate()
        return config

    def validate(self) -> None:
        """Reject non-positive bounds."""
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "initial_poll_delay":
                if value < 0:
                    raise ConfigError(f"{f.name} must be >= 0, got {value}")
            elif value <= 0:
                raise ConfigError(f"{f.name} must be > 0, got {value}")
