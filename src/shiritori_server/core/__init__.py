"""Game rules: chain validation, session identity and submission flow."""
