from __future__ import annotations

import json

from lambctl.policy.statement import PolicyStatement, StatementDecodeError

def ensure_list(x):
    if x is None:
        return []
    return x if isinstance(x, list) else [x]

def load_policy(policy) -> dict:
    """Accepts the JSON string returned by GetPolicy or an already decoded document."""
    if isinstance(policy, (str, bytes)):
        try:
            policy = json.loads(policy)
        except json.JSONDecodeError as e:
            raise StatementDecodeError(f"malformed policy JSON: {e}") from e
    if not isinstance(policy, dict):
        raise StatementDecodeError(f"policy must be an object, got {type(policy).__name__}")
    return policy

def iter_statements(policy_doc, warn=None):
    for st in ensure_list(load_policy(policy_doc).get("Statement")):
        yield PolicyStatement.from_dict(st, warn=warn)
