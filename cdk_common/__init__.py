"""CDK Common configuration-resolution engine.

Resolves named templates against a layered deployment context, maps the
resolved text onto typed configuration records, and compiles principal
and policy-statement descriptors into ``aws_cdk.aws_iam`` objects.
"""

__version__ = "0.1.0"
