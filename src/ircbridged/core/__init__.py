"""Core types shared across the bridge."""
