"""Synthetic usage event generation.

Token counts come from a range table keyed by scale. ``light`` and
``medium`` draw upward from a lower bound; ``heavy`` sits just under a fixed
ceiling, each field subtracting its own small random offset.
"""
import enum
import hashlib
import random
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from usagehook.config import settings
from usagehook.metrics import usage_events_generated_total
from usagehook.schemas.usage_event import Identity, TokenCounts, UsageEvent

logger = structlog.get_logger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
TOKEN_FIELDS = ("input", "output", "cache_creation", "cache_read")

# Token counts on the batch base template
TEMPLATE_TOKENS = {
    "input": 98980,
    "output": 30990,
    "cache_creation": 238991,
    "cache_read": 298991,
}


class Scale(str, enum.Enum):
    """Usage intensity tier."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"

    @classmethod
    def parse(cls, value: Any) -> "Scale":
        """Resolve a scale name; anything unrecognized becomes MEDIUM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            logger.debug("unknown_scale_fallback", requested=value, fallback=cls.MEDIUM.value)
            return cls.MEDIUM


class HashStrategy(str, enum.Enum):
    """How the interaction hash input is composed."""

    # sha256(timestamp + message_id + request_id); id and hash share the digest
    MESSAGE_REQUEST = "message_request"
    # sha256(timestamp + interaction_id + random float); id is "int_" + hex
    INTERACTION_NONCE = "interaction_nonce"


@dataclass(frozen=True)
class TokenRange:
    """
    One token field's distribution.

    Lower-anchored: ``anchor + randrange(span)``.
    Ceiling-anchored: ``anchor - offset - randrange(span)``.
    """

    anchor: int
    span: int
    offset: int = 0
    ceiling: bool = False

    def draw(self, rng: random.Random) -> int:
        jitter = rng.randrange(self.span)
        if self.ceiling:
            return self.anchor - self.offset - jitter
        return self.anchor + jitter

    @property
    def minimum(self) -> int:
        if self.ceiling:
            return self.anchor - self.offset - (self.span - 1)
        return self.anchor

    @property
    def maximum(self) -> int:
        if self.ceiling:
            return self.anchor - self.offset
        return self.anchor + self.span - 1


def _ceiling(anchor: int) -> TokenRange:
    return TokenRange(anchor=anchor, span=20, offset=1000, ceiling=True)


TOKEN_RANGES: dict[Scale, dict[str, TokenRange]] = {
    Scale.LIGHT: {
        "input": TokenRange(1000, 3000),
        "output": TokenRange(500, 1500),
        "cache_creation": TokenRange(0, 200),
        "cache_read": TokenRange(200, 800),
    },
    Scale.MEDIUM: {
        "input": TokenRange(8000, 15000),
        "output": TokenRange(5000, 10000),
        "cache_creation": TokenRange(500, 2000),
        "cache_read": TokenRange(1000, 5000),
    },
    Scale.HEAVY: {
        "input": _ceiling(100000),
        "output": _ceiling(32000),
        "cache_creation": _ceiling(300000),
        "cache_read": _ceiling(300000),
    },
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sha256_hex(*parts: str) -> str:
    return hashlib.sha256("".join(parts).encode("utf-8")).hexdigest()


def hash_message_request(timestamp: str, message_id: str, request_id: str) -> str:
    return sha256_hex(timestamp, message_id, request_id)


def hash_interaction_nonce(timestamp: str, interaction_id: str, nonce: str) -> str:
    return sha256_hex(timestamp, interaction_id, nonce)


def random_token(rng: random.Random, length: int = 9) -> str:
    """Short base-36 token; unique enough for correlation, not secret."""
    return "".join(rng.choice(BASE36_ALPHABET) for _ in range(length))


class UsageEventGenerator:
    """Builds synthetic usage events."""

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        model: str | None = None,
        default_handle: str | None = None,
        default_user_id: str | None = None,
    ):
        """
        Initialize the generator.

        Args:
            rng: Random source, a fresh ``random.Random`` by default
            clock: Returns the current time; used for event timestamps
            model: Model name stamped on generated events
            default_handle: Handle used when no identity is given
            default_user_id: User id paired with bare handles
        """
        self.rng = rng or random.Random()
        self.clock = clock or utcnow
        self.model = model or settings.event_model
        self.default_handle = default_handle or settings.default_handle
        self.default_user_id = default_user_id or settings.default_user_id

    def resolve_identity(self, identity: Identity | str | None) -> Identity:
        if isinstance(identity, Identity):
            return identity
        if identity is None:
            return Identity(handle=self.default_handle, user_id=self.default_user_id)
        return Identity(handle=identity, user_id=self.default_user_id)

    def draw_tokens(self, scale: Scale | str | None) -> TokenCounts:
        ranges = TOKEN_RANGES[Scale.parse(scale)]
        return TokenCounts(**{name: ranges[name].draw(self.rng) for name in TOKEN_FIELDS})

    def stamp(self, strategy: HashStrategy = HashStrategy.MESSAGE_REQUEST) -> dict[str, str]:
        """
        Fresh timestamp plus interaction id/hash for the given strategy.

        Returns:
            Dict with ``timestamp``, ``interaction_id`` and ``interaction_hash``
        """
        strategy = HashStrategy(strategy)
        timestamp = iso_timestamp(self.clock())

        if strategy is HashStrategy.INTERACTION_NONCE:
            interaction_id = f"int_{self.rng.getrandbits(128):032x}"
            nonce = repr(self.rng.random())
            interaction_hash = hash_interaction_nonce(timestamp, interaction_id, nonce)
            return {
                "timestamp": timestamp,
                "interaction_id": interaction_id,
                "interaction_hash": interaction_hash,
            }

        message_id = f"msg_{random_token(self.rng)}"
        request_id = f"req_{random_token(self.rng)}"
        interaction_hash = hash_message_request(timestamp, message_id, request_id)
        return {
            "timestamp": timestamp,
            "interaction_id": interaction_hash,
            "interaction_hash": interaction_hash,
        }

    def generate(
        self,
        identity: Identity | str | None = None,
        scale: Scale | str | None = Scale.MEDIUM,
        strategy: HashStrategy = HashStrategy.MESSAGE_REQUEST,
    ) -> UsageEvent:
        """
        Generate a standalone usage event.

        Args:
            identity: Identity, bare handle, or None for the default actor
            scale: Usage tier; unrecognized values fall back to medium
            strategy: Interaction hash composition

        Returns:
            New usage event
        """
        resolved_scale = Scale.parse(scale)
        strategy = HashStrategy(strategy)
        who = self.resolve_identity(identity)

        event = UsageEvent(
            twitter_handle=who.handle,
            twitter_user_id=who.user_id,
            tokens=self.draw_tokens(resolved_scale),
            model=self.model,
            **self.stamp(strategy),
        )

        usage_events_generated_total.labels(scale=resolved_scale.value).inc()
        logger.debug(
            "usage_event_generated",
            scale=resolved_scale.value,
            strategy=strategy.value,
            handle=who.handle,
        )
        return event

    def template(self) -> UsageEvent:
        """Base event for batch runs: fixed tokens, template identity and model."""
        return UsageEvent(
            twitter_handle=settings.template_handle,
            twitter_user_id=settings.template_user_id,
            tokens=TokenCounts(**TEMPLATE_TOKENS),
            model=settings.template_model,
            **self.stamp(HashStrategy.INTERACTION_NONCE),
        )

    def restamp(
        self,
        template: UsageEvent,
        strategy: HashStrategy = HashStrategy.INTERACTION_NONCE,
    ) -> UsageEvent:
        """Copy of ``template`` with a new timestamp and interaction id/hash."""
        return template.model_copy(update=self.stamp(strategy))


_default_generator: UsageEventGenerator | None = None


def get_generator() -> UsageEventGenerator:
    global _default_generator
    if _default_generator is None:
        _default_generator = UsageEventGenerator()
    return _default_generator


def generate(
    identity: Identity | str | None = None,
    scale: Scale | str | None = Scale.MEDIUM,
    strategy: HashStrategy = HashStrategy.MESSAGE_REQUEST,
) -> UsageEvent:
    """Generate a usage event with the process-wide generator."""
    return get_generator().generate(identity, scale, strategy)
