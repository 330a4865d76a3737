"""Serialization contract guard for Java sources."""
