"""Parley chat backend application."""
