"""Presentation layer: JSON blueprints over the business workflows and read services."""
