from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from lambctl.policy.parser import ensure_list, iter_statements

INVOKE_FUNCTION_URL_ACTION = "lambda:InvokeFunctionUrl"


@dataclass(frozen=True)
class FunctionURLPermission:
    """Who may call a function URL, as granted by one policy statement."""

    statement_id: Optional[str]
    principal: Optional[str]
    principal_org_id: Optional[str]
    source_arn: Optional[str]
    auth_type: Optional[str]

    def as_dict(self) -> dict:
        return asdict(self)


def _grants_url_invoke(st) -> bool:
    if st.effect != "Allow":
        return False
    actions = st.action if isinstance(st.action, tuple) else ensure_list(st.action)
    return INVOKE_FUNCTION_URL_ACTION in actions


def function_url_permissions(policy_doc, warn=None) -> list[FunctionURLPermission]:
    out = []
    for st in iter_statements(policy_doc, warn=warn):
        if not _grants_url_invoke(st):
            continue
        out.append(FunctionURLPermission(
            statement_id=st.sid,
            principal=st.principal_string(),
            principal_org_id=st.principal_org_id(),
            source_arn=st.source_arn(),
            auth_type=st.auth_type(),
        ))
    return out
