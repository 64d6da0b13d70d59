"""Dialogue session and structured-response protocol."""
