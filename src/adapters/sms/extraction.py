"""
Provider response extraction rules.

The provider reports the same facts under different field names depending
on API version and endpoint. Each fact is resolved by an ordered table of
rules evaluated against the decoded JSON body; the first rule that matches
wins. The tables are data, kept apart from the HTTP client so they can be
tested directly against captured responses.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

_MISSING = object()


def lookup(payload: Any, path: tuple[str, ...]) -> Any:
    """Follow path through nested mappings. Returns _MISSING on any gap."""
    current = payload
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return _MISSING
        current = current[key]
    return current


def is_true(value: Any) -> bool:
    """Boolean signal: True, or the string "true" in any case."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def equals(expected: str) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, str) and value.strip().upper() == expected

    return check


@dataclass(frozen=True)
class FieldRule:
    """Reads a non-empty scalar at path."""

    name: str
    path: tuple[str, ...]

    def extract(self, payload: Any) -> str | None:
        value = lookup(payload, self.path)
        if value is _MISSING or value is None or isinstance(value, (Mapping, list, bool)):
            return None
        text = str(value).strip()
        return text or None


@dataclass(frozen=True)
class SignalRule:
    """Matches when every (path, predicate) condition holds."""

    name: str
    conditions: tuple[tuple[tuple[str, ...], Callable[[Any], bool]], ...]

    def matches(self, payload: Any) -> bool:
        for path, predicate in self.conditions:
            value = lookup(payload, path)
            if value is _MISSING or not predicate(value):
                return False
        return True


SESSION_REF_RULES: tuple[FieldRule, ...] = (
    FieldRule("data.verificationId", ("data", "verificationId")),
    FieldRule("verificationId", ("verificationId",)),
    FieldRule("id", ("id",)),
    FieldRule("verification_id", ("verification_id",)),
)

VALIDITY_RULES: tuple[SignalRule, ...] = (
    SignalRule(
        "data.verificationStatus",
        ((("data", "verificationStatus"), equals("VERIFICATION_COMPLETED")),),
    ),
    SignalRule(
        "verificationStatus",
        ((("verificationStatus",), equals("VERIFICATION_COMPLETED")),),
    ),
    SignalRule("valid", ((("valid",), is_true),)),
    SignalRule("status", ((("status",), equals("SUCCESS")),)),
    SignalRule("verified", ((("verified",), is_true),)),
    SignalRule("data.valid", ((("data", "valid"), is_true),)),
    SignalRule("data.status", ((("data", "status"), equals("SUCCESS")),)),
    SignalRule(
        "message+responseCode",
        (
            (("message",), equals("SUCCESS")),
            (("responseCode",), lambda value: value == 200 or value == "200"),
        ),
    ),
)


def extract_session_ref(
    payload: Any, rules: tuple[FieldRule, ...] = SESSION_REF_RULES
) -> tuple[str | None, str | None]:
    """Return (session_ref, rule name) for the first matching rule, else (None, None)."""
    for rule in rules:
        value = rule.extract(payload)
        if value is not None:
            return value, rule.name
    return None, None


def match_validity(payload: Any, rules: tuple[SignalRule, ...] = VALIDITY_RULES) -> str | None:
    """Return the name of the first rule proving validity, or None."""
    for rule in rules:
        if rule.matches(payload):
            return rule.name
    return None
