"""Configuration records.

Defines the data structures the engine maps resolved text onto:
- Common: Deployment identity record
- PrincipalConf: Tagged union of principal descriptors
- PolicyStatementConf: Allow/deny statement descriptor
- PolicyConf / BucketPolicyConf: Policy template references
"""

from cdk_common.models.common import Common
from cdk_common.models.principal import (
    AccountPrincipalConf,
    ArnPrincipalConf,
    FederatedPrincipalConf,
    PrincipalConf,
    PrincipalKind,
    ServicePrincipalConf,
    WildcardPrincipalConf,
    principal_conf,
)
from cdk_common.models.statement import (
    BucketPolicyConf,
    PolicyConf,
    PolicyDocumentConf,
    PolicyStatementConf,
)

__all__ = [
    "AccountPrincipalConf",
    "ArnPrincipalConf",
    "BucketPolicyConf",
    "Common",
    "FederatedPrincipalConf",
    "PolicyConf",
    "PolicyDocumentConf",
    "PolicyStatementConf",
    "PrincipalConf",
    "PrincipalKind",
    "ServicePrincipalConf",
    "WildcardPrincipalConf",
    "principal_conf",
]
