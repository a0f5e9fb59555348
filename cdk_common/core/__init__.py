"""Core utilities and shared infrastructure.

- config: Engine configuration loading and validation
- constants: Context namespaces and identity key names
- context: Two-level deployment context store
- exceptions: Resolution exception hierarchy
"""
