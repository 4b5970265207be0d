"""User administration service: accounts, roles, and ownership-scoped visibility."""

__version__ = "0.1.0"
