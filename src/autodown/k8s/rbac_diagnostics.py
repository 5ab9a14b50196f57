"""Best-effort hints for Kubernetes RBAC forbidden errors."""

from __future__ import annotations

import re


_FORBIDDEN_PATTERN = re.compile(
    r'User\s+"(?P<user>[^"]+)"\s+cannot\s+(?P<verb>[a-z]+)\s+resource\s+"(?P<resource>[^"]+)"\s+'
    r'in\s+API\s+group\s+"(?P<api_group>[^"]*)"\s+'
    r'(?:(?:in\s+the\s+namespace\s+"(?P<namespace>[^"]+)")|(?:at\s+the\s+cluster\s+scope))',
    re.IGNORECASE,
)


def parse_forbidden(text: str) -> dict | None:
    """Extract user, verb, resource, API group and namespace from a Forbidden error."""
    if not isinstance(text, str):
        return None
    raw = text.strip()
    if "forbidden" not in raw.lower():
        return None
    match = _FORBIDDEN_PATTERN.search(raw)
    if not match:
        return None
    return {
        "user": match.group("user"),
        "verb": match.group("verb").lower(),
        "resource": match.group("resource"),
        "api_group": match.group("api_group"),
        "namespace": match.group("namespace"),
    }


def forbidden_hint(text: str) -> str | None:
    parsed = parse_forbidden(text)
    if parsed is None:
        return None
    if parsed["namespace"]:
        binding = f'Role/RoleBinding in namespace "{parsed["namespace"]}"'
    else:
        binding = "ClusterRole/ClusterRoleBinding"
    return (
        f'grant {binding} allowing verbs=["{parsed["verb"]}"] on '
        f'resources=["{parsed["resource"]}"] in apiGroups=["{parsed["api_group"]}"] '
        f'to "{parsed["user"]}"'
    )
