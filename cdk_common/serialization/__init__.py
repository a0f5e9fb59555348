"""Text-level resolution.

- naming: Construct ids, resource names, descriptions and export names
- template: Template loading and placeholder substitution
- mapper: YAML/JSON text to typed configuration records
"""
