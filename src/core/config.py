"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AiReplyConfig:
    """Settings for the AI smart reply generator."""

    enabled: bool
    model: str
    system_prompt: str
    temperature: float
    max_tokens: int
    timeout_seconds: float


@dataclass(frozen=True)
class RoutingConfig:
    """Per-message routing limits."""

    route_timeout_seconds: Optional[float]


@dataclass(frozen=True)
class ActivityConfig:
    """Activity log retention and persistence."""

    max_entries: Optional[int]
    persist: bool
    ttl_days: int
