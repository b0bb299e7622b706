"""Test doubles and canned payloads shared across test modules."""
