"""User administration: lifecycle operations, visibility and HTTP routes."""
