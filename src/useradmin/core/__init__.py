"""Cross-cutting building blocks: RBAC, principals, security and HTTP glue."""
