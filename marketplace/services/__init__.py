"""Read-side services: queries and response shaping for the presentation layer."""
