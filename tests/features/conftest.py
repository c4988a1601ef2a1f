"""Shared fixtures for BDD feature tests."""
