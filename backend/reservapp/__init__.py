"""Reservapp booking backend."""
