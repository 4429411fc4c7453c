"""Declarative field rules used to map raw webhook rows onto canonical records.

A rule names one output field, the raw keys that may carry it (in priority
order), and how the matched value is coerced. Supporting another historical
alias of a field is a one-line edit to a rule table in
:mod:`minedash.normalization.reference_data`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Mapping, Sequence, Tuple

from minedash.normalization.coercion import (
    coerce_array,
    coerce_bool,
    coerce_float,
    coerce_int,
    coerce_map,
    coerce_optional_str,
    coerce_str,
)

CoercionKind = Literal["int", "float", "str", "optional_str", "bool", "array", "map", "raw"]

_MISSING = object()


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Mapping of one canonical field to its ordered raw-key candidates.

    ``default`` is used when no candidate key holds a non-``None`` value.
    ``fallback`` is used when a value was found but could not be parsed
    (numeric kinds only); it defaults to ``default``.

    ``bool`` rules are special: the first candidate is the primary flag and
    accepts ``True`` or ``"true"``; the remaining candidates are alternates
    that only count when they hold a real ``True``.
    """

    field: str
    candidates: Tuple[str, ...]
    kind: CoercionKind
    default: Any = None
    fallback: Any = _MISSING

    def __post_init__(self) -> None:
        if not self.candidates:
            raise ValueError(f"Field rule {self.field!r} needs at least one candidate key")

    def resolve(self, record: Mapping[str, Any], default: Any = _MISSING) -> Any:
        """Return the coerced value of this field for ``record``."""

        if default is _MISSING:
            default = self.default
        if self.kind == "bool":
            primary = record.get(self.candidates[0])
            alternate = any(record.get(key) is True for key in self.candidates[1:])
            return coerce_bool(primary, alternate)

        value = first_present(record, self.candidates)
        if value is None:
            return _fresh(default)
        fallback = default if self.fallback is _MISSING else self.fallback
        return _COERCERS[self.kind](value, fallback)


def first_present(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the value of the first key in ``keys`` holding a non-``None`` value."""

    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def apply_rules(
    record: Mapping[str, Any],
    rules: Sequence[FieldRule],
    *,
    defaults: Mapping[str, Any] | None = None,
) -> Dict[str, Any]:
    """Resolve every rule against ``record``.

    Args:
        record: Raw, already-unwrapped webhook row.
        rules: Rule table describing the target record.
        defaults: Optional per-field overrides of the rule defaults.

    Returns:
        Dictionary keyed by canonical field name.
    """

    overrides = defaults or {}
    resolved: Dict[str, Any] = {}
    for rule in rules:
        resolved[rule.field] = rule.resolve(record, overrides.get(rule.field, _MISSING))
    return resolved


def _fresh(default: Any) -> Any:
    # Mutable defaults are copied so records never share containers.
    if isinstance(default, (list, dict)):
        return type(default)()
    return default


_COERCERS: Dict[str, Callable[[Any, Any], Any]] = {
    "int": coerce_int,
    "float": coerce_float,
    "str": coerce_str,
    "optional_str": lambda value, fallback: coerce_optional_str(value),
    "array": lambda value, fallback: coerce_array(value),
    "map": lambda value, fallback: coerce_map(value),
    "raw": lambda value, fallback: value,
}


__all__ = ["CoercionKind", "FieldRule", "apply_rules", "first_present"]
