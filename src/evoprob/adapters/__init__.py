"""Adapters between problem schemas and optimizer libraries."""
