"""Dash primitives: Base58Check addresses, scripts, wire transactions."""
