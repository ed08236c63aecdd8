"""Configuration, logging, security primitives and schema migrations."""
