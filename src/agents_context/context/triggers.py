"""Compaction triggers and their evaluation.

A trigger is a single threshold rule over a :class:`SizeEstimate`.
Configured triggers combine with OR semantics: compaction fires when any
one of them is satisfied, and firing is binary.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field, model_validator

from agents_context.context.estimator import SizeEstimate
from agents_context.errors import InvalidConfigurationError


class TriggerType(str, Enum):
    """Kinds of compaction triggers."""

    TOKENS = "tokens"  # Absolute token ceiling
    MESSAGES = "messages"  # Message count ceiling
    FRACTION = "fraction"  # Fraction of the model context window


class Trigger(BaseModel):
    """One threshold rule. Exactly one field must be set."""

    tokens: Optional[int] = Field(default=None, gt=0, description="Token ceiling")
    messages: Optional[int] = Field(default=None, gt=0, description="Message ceiling")
    fraction: Optional[float] = Field(
        default=None, gt=0.0, le=1.0, description="Fraction of model context limit"
    )

    @model_validator(mode="after")
    def _check_single_threshold(self) -> "Trigger":
        set_fields = [
            name for name in ("tokens", "messages", "fraction")
            if getattr(self, name) is not None
        ]
        if len(set_fields) != 1:
            raise ValueError(
                "A trigger needs exactly one of tokens, messages or fraction, "
                f"got {set_fields or 'none'}"
            )
        return self

    @classmethod
    def on_tokens(cls, tokens: int) -> "Trigger":
        return cls(tokens=tokens)

    @classmethod
    def on_messages(cls, messages: int) -> "Trigger":
        return cls(messages=messages)

    @classmethod
    def on_fraction(cls, fraction: float) -> "Trigger":
        return cls(fraction=fraction)

    @property
    def trigger_type(self) -> TriggerType:
        if self.tokens is not None:
            return TriggerType.TOKENS
        if self.messages is not None:
            return TriggerType.MESSAGES
        return TriggerType.FRACTION

    @property
    def threshold(self) -> Union[int, float]:
        return getattr(self, self.trigger_type.value)

    def is_satisfied(
        self,
        estimate: SizeEstimate,
        model_context_limit: Optional[int] = None,
    ) -> bool:
        """Check this trigger against a size estimate.

        Args:
            estimate: Current history size.
            model_context_limit: Model context size in tokens, needed by
                fraction triggers. Without it a fraction trigger never fires.

        Returns:
            True if the threshold is reached.
        """
        if self.tokens is not None:
            return estimate.estimated_tokens >= self.tokens
        if self.messages is not None:
            return estimate.message_count >= self.messages
        if not model_context_limit:
            return False
        return estimate.estimated_tokens >= self.fraction * model_context_limit

    def __str__(self) -> str:
        return f"{self.trigger_type.value}>={self.threshold}"


TriggerSpec = Union[Trigger, Mapping[str, Any], Sequence[Union[Trigger, Mapping[str, Any]]], None]


def parse_triggers(spec: TriggerSpec) -> List[Trigger]:
    """Normalize a trigger specification into an ordered list.

    Accepts a :class:`Trigger`, a mapping such as
    ``{"tokens": 1000, "messages": 8}`` (one trigger per key, in key order),
    or a sequence of either.

    Raises:
        InvalidConfigurationError: On unknown keys or unsupported types.
    """
    if spec is None:
        return []
    if isinstance(spec, Trigger):
        return [spec]
    if isinstance(spec, Mapping):
        triggers = []
        for key, value in spec.items():
            if key not in {t.value for t in TriggerType}:
                raise InvalidConfigurationError(f"Unknown trigger type: {key!r}")
            triggers.append(Trigger(**{key: value}))
        return triggers
    if isinstance(spec, (list, tuple)):
        triggers = []
        for item in spec:
            if not isinstance(item, (Trigger, Mapping)):
                raise InvalidConfigurationError(
                    f"Unsupported trigger entry: {item!r}"
                )
            triggers.extend(parse_triggers(item))
        return triggers
    raise InvalidConfigurationError(f"Unsupported trigger specification: {spec!r}")


class TriggerEvaluator:
    """Evaluates an ordered set of triggers with OR semantics."""

    def __init__(
        self,
        triggers: TriggerSpec = None,
        model_context_limit: Optional[int] = None,
    ):
        """Initialize trigger evaluator.

        Args:
            triggers: Trigger specification (see :func:`parse_triggers`).
            model_context_limit: Model context size for fraction triggers.
        """
        self.triggers = parse_triggers(triggers)
        self.model_context_limit = model_context_limit

    def fired(self, estimate: SizeEstimate) -> List[Trigger]:
        """Return the triggers satisfied by the estimate, in configured order."""
        return [
            trigger for trigger in self.triggers
            if trigger.is_satisfied(estimate, self.model_context_limit)
        ]

    def should_compact(self, estimate: SizeEstimate) -> bool:
        """Check whether any trigger is satisfied.

        An empty trigger set never fires.
        """
        return any(
            trigger.is_satisfied(estimate, self.model_context_limit)
            for trigger in self.triggers
        )
