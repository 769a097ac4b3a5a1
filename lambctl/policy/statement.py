"""Interpretation of a single resource-policy statement.

A statement's ``Principal`` may be the wildcard string, an ``{"AWS": ...}``
account object or a ``{"Service": ...}`` service object. The values that
matter for function URL access (organization id, source ARN) live inside
the ``Condition`` block, keyed by operator and then by condition key.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from lambctl.jsonutil import decode_fields

WILDCARD = "*"
PRINCIPAL_ORG_ID_KEY = "aws:PrincipalOrgID"
SOURCE_ARN_KEY = "aws:SourceArn"
FUNCTION_URL_AUTH_TYPE_KEY = "lambda:FunctionUrlAuthType"

STATEMENT_FIELDS = ("Sid", "Effect", "Principal", "Action", "Resource", "Condition")

_EMPTY: Mapping[str, Mapping[str, Any]] = MappingProxyType({})


class StatementDecodeError(ValueError):
    pass


class PrincipalKind(Enum):
    WILDCARD = "wildcard"
    ACCOUNT = "account"
    SERVICE = "service"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Principal:
    kind: PrincipalKind
    value: Optional[str] = None
    raw: Optional[Mapping[str, Any]] = None

    @classmethod
    def decode(cls, p) -> "Principal":
        if isinstance(p, str):
            if p != WILDCARD:
                raise StatementDecodeError(f"unsupported Principal string: {p!r}")
            return cls(PrincipalKind.WILDCARD, WILDCARD)
        if isinstance(p, dict):
            for key, kind in (("AWS", PrincipalKind.ACCOUNT), ("Service", PrincipalKind.SERVICE)):
                if key not in p:
                    continue
                v = p[key]
                if not isinstance(v, str):
                    raise StatementDecodeError(f"Principal.{key} must be a string, got {type(v).__name__}")
                return cls(kind, v)
            return cls(PrincipalKind.UNKNOWN, raw=_freeze(p))
        raise StatementDecodeError(f"Principal must be a string or an object, got {type(p).__name__}")

    def encode(self):
        if self.kind is PrincipalKind.WILDCARD:
            return WILDCARD
        if self.kind is PrincipalKind.ACCOUNT:
            return {"AWS": self.value}
        if self.kind is PrincipalKind.SERVICE:
            return {"Service": self.value}
        return _thaw(self.raw) if self.raw is not None else {}


def account_id_from_arn(value: str) -> str:
    """Return the account id of ``arn:<partition>:<service>::<id>:root``.

    Anything else (bare account ids, malformed ARNs) comes back unchanged.
    """
    parts = value.split(":")
    if len(parts) != 6 or parts[0] != "arn" or parts[5] != "root" or not parts[4]:
        return value
    return parts[4]


def _as_string(v) -> Optional[str]:
    if v is None or isinstance(v, Mapping):
        return None
    if isinstance(v, tuple):
        return _as_string(v[0]) if v else None
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


def _decode_condition(c) -> Mapping[str, Mapping[str, Any]]:
    if c is None:
        return _EMPTY
    if not isinstance(c, dict):
        raise StatementDecodeError(f"Condition must be an object, got {type(c).__name__}")
    for operator, entries in c.items():
        if not isinstance(entries, dict):
            raise StatementDecodeError(f"Condition.{operator} must be an object, got {type(entries).__name__}")
    return _freeze(c)


def _string(data: dict, key: str) -> Optional[str]:
    v = data.get(key)
    if v is not None and not isinstance(v, str):
        raise StatementDecodeError(f"{key} must be a string, got {type(v).__name__}")
    return v


def _strings(data: dict, key: str):
    v = data.get(key)
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, list) and all(isinstance(x, str) for x in v):
        return tuple(v)
    raise StatementDecodeError(f"{key} must be a string or a list of strings")


@dataclass(frozen=True)
class PolicyStatement:
    sid: Optional[str] = None
    effect: Optional[str] = None
    action: Any = None
    resource: Any = None
    principal: Optional[Principal] = None
    condition: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: _EMPTY)

    @classmethod
    def from_dict(cls, data, warn: Optional[Callable[[str], None]] = None) -> "PolicyStatement":
        if not isinstance(data, dict):
            raise StatementDecodeError(f"statement must be an object, got {type(data).__name__}")
        data = decode_fields(data, STATEMENT_FIELDS, "policy statement", warn=warn)

        principal = data.get("Principal")
        return cls(
            sid=_string(data, "Sid"),
            effect=_string(data, "Effect"),
            action=_strings(data, "Action"),
            resource=_strings(data, "Resource"),
            principal=Principal.decode(principal) if principal is not None else None,
            condition=_decode_condition(data.get("Condition")),
        )

    @classmethod
    def from_json(cls, text, warn: Optional[Callable[[str], None]] = None) -> "PolicyStatement":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StatementDecodeError(f"malformed statement JSON: {e}") from e
        return cls.from_dict(data, warn=warn)

    def to_dict(self) -> dict:
        out: dict = {}
        for key, v in (("Sid", self.sid), ("Effect", self.effect), ("Action", self.action), ("Resource", self.resource)):
            if v is not None:
                out[key] = _thaw(v)
        if self.principal is not None:
            out["Principal"] = self.principal.encode()
        if self.condition:
            out["Condition"] = _thaw(self.condition)
        return out

    def principal_string(self) -> Optional[str]:
        p = self.principal
        if p is None:
            return None
        if p.kind is PrincipalKind.WILDCARD:
            return WILDCARD
        if p.kind is PrincipalKind.ACCOUNT:
            return account_id_from_arn(p.value)
        if p.kind is PrincipalKind.SERVICE:
            return p.value
        return None

    def condition_value(self, key: str) -> Optional[str]:
        # operators in document order, exact key within each; first hit wins
        for entries in self.condition.values():
            if key in entries:
                return _as_string(entries[key])
        return None

    def principal_org_id(self) -> Optional[str]:
        return self.condition_value(PRINCIPAL_ORG_ID_KEY)

    def source_arn(self) -> Optional[str]:
        return self.condition_value(SOURCE_ARN_KEY)

    def auth_type(self) -> Optional[str]:
        return self.condition_value(FUNCTION_URL_AUTH_TYPE_KEY)


def _freeze(v):
    if isinstance(v, list):
        return tuple(_freeze(x) for x in v)
    if isinstance(v, dict):
        return MappingProxyType({k: _freeze(x) for k, x in v.items()})
    return v


def _thaw(v):
    if isinstance(v, tuple):
        return [_thaw(x) for x in v]
    if isinstance(v, Mapping):
        return {k: _thaw(x) for k, x in v.items()}
    return v
