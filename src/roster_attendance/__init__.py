"""Roster attendance package.

This package is organized by feature modules (users, events, attendance)
with a thin Flask controller layer over service, hook and repository layers.
"""
