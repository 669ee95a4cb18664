"""Parking System package.

This package is organized by feature modules (users, parking, pricing, reports, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
