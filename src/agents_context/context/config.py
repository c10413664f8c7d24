"""Configuration for context window compaction."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from agents_context.context.estimator import DEFAULT_CHARS_PER_TOKEN
from agents_context.context.triggers import Trigger, parse_triggers
from agents_context.errors import InvalidConfigurationError


class RetentionPolicy(BaseModel):
    """How many recent messages survive compaction verbatim.

    Exactly one of ``messages`` (a count) or ``fraction`` (of the
    pre-compaction message count) must be set.
    """

    messages: Optional[int] = Field(default=None, ge=1, description="Messages to keep")
    fraction: Optional[float] = Field(
        default=None, gt=0.0, lt=1.0, description="Fraction of messages to keep"
    )

    @model_validator(mode="after")
    def _check_single_value(self) -> "RetentionPolicy":
        if (self.messages is None) == (self.fraction is None):
            raise ValueError("A retention policy needs exactly one of messages or fraction")
        return self

    def resolve(self, total: int) -> int:
        """Number of messages to keep out of ``total``."""
        if self.messages is not None:
            return self.messages
        return max(1, int(total * self.fraction))


RetentionSpec = Union[RetentionPolicy, Mapping[str, Any], int, None]


def parse_retention(spec: RetentionSpec) -> RetentionPolicy:
    """Normalize a retention specification.

    Accepts a :class:`RetentionPolicy`, a mapping like ``{"messages": 6}``
    or a bare message count.
    """
    if spec is None:
        return RetentionPolicy(messages=20)
    if isinstance(spec, RetentionPolicy):
        return spec
    if isinstance(spec, bool):
        raise InvalidConfigurationError(f"Unsupported retention specification: {spec!r}")
    if isinstance(spec, int):
        return RetentionPolicy(messages=spec)
    if isinstance(spec, Mapping):
        unknown = set(spec) - {"messages", "fraction"}
        if unknown:
            raise InvalidConfigurationError(
                f"Unknown retention keys: {sorted(unknown)}"
            )
        return RetentionPolicy(**dict(spec))
    raise InvalidConfigurationError(f"Unsupported retention specification: {spec!r}")


class CompactionConfig(BaseModel):
    """Configuration for the context window manager.

    Example:
        config = CompactionConfig(
            triggers=[{"tokens": 1000}, {"messages": 8}],
            retention={"messages": 6},
        )
    """

    triggers: List[Trigger] = Field(
        default_factory=list, description="OR-combined compaction triggers"
    )
    retention: RetentionPolicy = Field(
        default_factory=lambda: RetentionPolicy(messages=20),
        description="Messages kept verbatim after compaction",
    )
    model_context_limit: Optional[int] = Field(
        default=None, gt=0, description="Model context size for fraction triggers"
    )
    chars_per_token: int = Field(
        default=DEFAULT_CHARS_PER_TOKEN, gt=0, description="Token estimate divisor"
    )

    @field_validator("triggers", mode="before")
    @classmethod
    def _parse_triggers(cls, value: Any) -> List[Trigger]:
        return parse_triggers(value)

    @field_validator("retention", mode="before")
    @classmethod
    def _parse_retention(cls, value: Any) -> RetentionPolicy:
        return parse_retention(value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompactionConfig":
        """Build a config from a plain mapping.

        Understands ``trigger``/``triggers`` and ``keep``/``retention`` as
        aliases, matching the middleware-style configuration surface.

        Args:
            data: Configuration mapping.

        Returns:
            Validated CompactionConfig.
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in ("trigger", "triggers"):
                values["triggers"] = value
            elif key in ("keep", "retention"):
                values["retention"] = value
            elif key in ("model_context_limit", "chars_per_token"):
                values[key] = value
            else:
                raise InvalidConfigurationError(f"Unknown configuration key: {key!r}")
        return cls(**values)


# Summarize at 1000 estimated tokens or 8 messages, keeping the last 6
RESEARCH_ASSISTANT_CONFIG = CompactionConfig(
    triggers=[{"tokens": 1000}, {"messages": 8}],
    retention={"messages": 6},
)
