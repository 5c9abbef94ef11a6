"""Test infrastructure - shared coordinators and components.

This package contains test support code, NOT actual tests.
"""
