"""Bookings domain - intake pipeline, booking form state and API client"""
