"""Tests for principal resolution into ``aws_iam`` principals.

Covers:
- One primitive per principal kind
- Composite principals and attached conditions
- Unknown kinds at any nesting depth
"""

from __future__ import annotations

from typing import ClassVar

import aws_cdk as cdk
import pytest
from aws_cdk import aws_iam as iam

from cdk_common.core.exceptions import MalformedConfigError, UnknownPrincipalKindError
from cdk_common.iam import resolve_principal, resolve_principals
from cdk_common.models.principal import ArnPrincipalConf, FederatedPrincipalConf, ServicePrincipalConf

ROLE_A = "arn:aws:iam::123456789012:role/deployer"
ROLE_B = "arn:aws:iam::210987654321:role/auditor"


class TestSimplePrincipals:
    """Each kind maps to exactly one primitive."""

    def test_service(self) -> None:
        principal = resolve_principal({"kind": "service", "value": "lambda.amazonaws.com"})
        assert isinstance(principal, iam.ServicePrincipal)
        assert principal.service == "lambda.amazonaws.com"

    @pytest.mark.parametrize("kind", ["ACCOUNT", "AWS_ACCOUNT", "aws"])
    def test_account(self, kind: str) -> None:
        principal = resolve_principal({"kind": kind, "value": "123456789012"})
        assert isinstance(principal, iam.AccountPrincipal)
        assert principal.account_id == "123456789012"

    def test_arn(self) -> None:
        principal = resolve_principal({"kind": "ARN", "value": ROLE_A})
        assert isinstance(principal, iam.ArnPrincipal)
        assert principal.arn == ROLE_A

    def test_federated_default_action(self) -> None:
        principal = resolve_principal({"kind": "federated", "value": "cognito-identity.amazonaws.com"})
        assert isinstance(principal, iam.FederatedPrincipal)
        assert principal.federated == "cognito-identity.amazonaws.com"
        assert principal.assume_role_action == "sts:AssumeRole"

    def test_federated_custom_action(self) -> None:
        conf = FederatedPrincipalConf(
            value="arn:aws:iam::123456789012:saml-provider/okta",
            action="sts:AssumeRoleWithSAML",
        )
        principal = resolve_principal(conf)
        assert principal.assume_role_action == "sts:AssumeRoleWithSAML"

    def test_wildcard(self) -> None:
        principal = resolve_principal({"kind": "WILDCARD", "value": "*"})
        assert isinstance(principal, iam.StarPrincipal)
        assert principal.policy_fragment.principal_json == {"AWS": ["*"]}

    def test_model_input(self) -> None:
        principal = resolve_principal(ArnPrincipalConf(value=ROLE_B))
        assert principal.arn == ROLE_B


class TestCompositePrincipals:
    def test_members_merged(self) -> None:
        principal = resolve_principal(
            {"kind": "arn", "value": ROLE_A, "composite": [{"kind": "arn", "value": ROLE_B}]}
        )
        assert isinstance(principal, iam.CompositePrincipal)
        assert principal.policy_fragment.principal_json == {"AWS": [ROLE_A, ROLE_B]}

    def test_nested_composite(self) -> None:
        role_c = "arn:aws:iam::123456789012:role/builder"
        principal = resolve_principal(
            {
                "kind": "arn",
                "value": ROLE_A,
                "composite": [
                    {"kind": "arn", "value": ROLE_B, "composite": [{"kind": "arn", "value": role_c}]},
                ],
            }
        )
        assert principal.policy_fragment.principal_json == {"AWS": [ROLE_A, ROLE_B, role_c]}

    def test_mixed_kinds(self) -> None:
        stack = cdk.Stack(cdk.App(), "principals", env=cdk.Environment(account="123456789012", region="us-east-1"))
        principal = resolve_principal(
            {
                "kind": "service",
                "value": "lambda.amazonaws.com",
                "composite": [{"kind": "service", "value": "edgelambda.amazonaws.com"}],
            }
        )
        assert isinstance(principal, iam.CompositePrincipal)
        services = stack.resolve(principal.policy_fragment.principal_json)["Service"]
        assert sorted(services) == ["edgelambda.amazonaws.com", "lambda.amazonaws.com"]

    def test_empty_composite_is_plain(self) -> None:
        principal = resolve_principal({"kind": "arn", "value": ROLE_A, "composite": []})
        assert isinstance(principal, iam.ArnPrincipal)


class TestConditions:
    CONDITIONS: ClassVar[dict[str, dict[str, str]]] = {"StringEquals": {"aws:SourceAccount": "123456789012"}}

    def test_conditions_attached(self) -> None:
        principal = resolve_principal(
            {"kind": "service", "value": "s3.amazonaws.com", "conditions": self.CONDITIONS}
        )
        assert principal.policy_fragment.conditions == self.CONDITIONS

    def test_conditions_on_composite(self) -> None:
        principal = resolve_principal(
            {
                "kind": "arn",
                "value": ROLE_A,
                "composite": [{"kind": "arn", "value": ROLE_B}],
                "conditions": self.CONDITIONS,
            }
        )
        fragment = principal.policy_fragment
        assert fragment.principal_json == {"AWS": [ROLE_A, ROLE_B]}
        assert fragment.conditions == self.CONDITIONS

    def test_no_conditions(self) -> None:
        principal = resolve_principal({"kind": "arn", "value": ROLE_A})
        assert not principal.policy_fragment.conditions

    def test_member_conditions_rejected_before_cdk(self) -> None:
        with pytest.raises(MalformedConfigError, match="must not carry conditions"):
            resolve_principal(
                {
                    "kind": "arn",
                    "value": ROLE_A,
                    "composite": [{"kind": "arn", "value": ROLE_B, "conditions": self.CONDITIONS}],
                }
            )


class TestUnknownKinds:
    def test_top_level(self) -> None:
        with pytest.raises(UnknownPrincipalKindError):
            resolve_principal({"kind": "GROUP", "value": "admins"})

    def test_inside_composite(self) -> None:
        with pytest.raises(UnknownPrincipalKindError):
            resolve_principal(
                {
                    "kind": "service",
                    "value": "lambda.amazonaws.com",
                    "composite": [{"kind": "USER", "value": "bob"}],
                }
            )

    def test_unsupported_object(self) -> None:
        with pytest.raises(UnknownPrincipalKindError):
            resolve_principal("lambda.amazonaws.com")


class TestBatch:
    def test_order_preserved(self) -> None:
        principals = resolve_principals(
            [
                ServicePrincipalConf(value="ecs-tasks.amazonaws.com"),
                {"kind": "arn", "value": ROLE_A},
                {"kind": "wildcard"},
            ]
        )
        assert [type(p) for p in principals] == [iam.ServicePrincipal, iam.ArnPrincipal, iam.StarPrincipal]

    def test_empty(self) -> None:
        assert resolve_principals([]) == []
