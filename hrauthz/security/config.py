from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from hrauthz.policy import DEFAULT_POLICY, AccessPolicy, build_policy


class AuthConfig(BaseModel):
    provider: str = "dummy"
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"


class DefaultRule(BaseModel):
    auth_required: bool = True
    scoped: bool = True


class RouteRule(BaseModel):
    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None
    resource: str | None = None
    action: str | None = None
    scoped: bool | None = None

    def normalized_methods(self) -> set[str]:
        return {m.upper() for m in self.methods}


class GuardConfig(BaseModel):
    """Dashboard page guard, driven by the `user` / `auth` cookies set at login."""

    protected_prefix: str = "/dashboard"
    login_path: str = "/login"
    callback_param: str = "callbackUrl"
    user_cookie: str = "user"
    auth_cookie: str = "auth"
    require_auth_cookie: bool = False
    # Role -> page to send that role to when it opens `protected_prefix` itself.
    role_landing: dict[str, str] = Field(default_factory=dict)


class PolicyDefinition(BaseModel):
    roles: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    scopes: dict[str, str] = Field(default_factory=dict)


class SecurityConfigModel(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)
    guard: GuardConfig = Field(default_factory=GuardConfig)
    policy: PolicyDefinition | None = None


@dataclass(frozen=True)
class EffectiveRule:
    """
    Fully-resolved rule (defaults applied) for a particular request.
    """

    auth_required: bool
    resource: str | None
    action: str | None
    scoped: bool


def _path_template_to_regex(path_template: str) -> re.Pattern[str]:
    # Convert "/employees/{id}" -> r"^/employees/[^/]+$"
    regex = re.sub(r"\{[^/]+\}", r"[^/]+", path_template)
    return re.compile(rf"^{regex}$")


class SecurityConfig:
    """
    Runtime helper around validated config + route matching.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model

        compiled: list[tuple[str, re.Pattern[str], RouteRule]] = []
        for rule in self.model.routes:
            compiled.append((rule.path, _path_template_to_regex(rule.path), rule))

        # Prefer exact matches over templates.
        self._exact_rules: dict[str, list[RouteRule]] = {}
        for r in self.model.routes:
            self._exact_rules.setdefault(r.path, []).append(r)
        self._compiled_rules = compiled

    @property
    def auth(self) -> AuthConfig:
        return self.model.auth

    @property
    def guard(self) -> GuardConfig:
        return self.model.guard

    def build_access_policy(self) -> AccessPolicy:
        """Policy from the optional `policy` section, else the built-in one."""
        if self.model.policy is None:
            return DEFAULT_POLICY
        return build_policy(self.model.policy.roles, self.model.policy.scopes)

    def match(self, path: str, method: str) -> EffectiveRule:
        """
        Find the best matching rule for (path, method), then apply defaults.
        """

        method = method.upper()
        default = self.model.default

        # 1) exact path match
        exact_candidates = self._exact_rules.get(path, [])
        for candidate in exact_candidates:
            if method in candidate.normalized_methods():
                return _effective(candidate, default)

        # 2) template match
        for _template, regex, candidate in self._compiled_rules:
            if method not in candidate.normalized_methods():
                continue
            if regex.match(path):
                return _effective(candidate, default)

        # 3) no match -> defaults
        return EffectiveRule(
            auth_required=default.auth_required,
            resource=None,
            action=None,
            scoped=default.scoped,
        )


def _effective(rule: RouteRule, default: DefaultRule) -> EffectiveRule:
    # A rule naming a resource is a permission check, and that needs a caller.
    inferred_auth_required = default.auth_required or bool(rule.resource)

    return EffectiveRule(
        auth_required=inferred_auth_required if rule.auth_required is None else rule.auth_required,
        resource=rule.resource,
        action=rule.action,
        scoped=default.scoped if rule.scoped is None else rule.scoped,
    )


def load_security_config(path: Path) -> SecurityConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if "security" not in raw:
        raise ValueError(f"Missing top-level 'security' key in config: {path}")

    model = SecurityConfigModel.model_validate(raw["security"])
    return SecurityConfig(model)
