"""Packages domain - inspection package catalogue and pricing lookups"""
