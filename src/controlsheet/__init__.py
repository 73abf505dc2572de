"""Declarative control sheets compiled into ready-to-render descriptors."""
