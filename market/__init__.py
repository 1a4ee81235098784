"""Marketplace backend: conversations and real-time chat."""
