"""Shared helpers used across niabridge layers."""
