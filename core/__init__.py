"""Core domain logic for home blood-pressure monitoring.

This package contains the business logic and domain models,
isolated from storage and presentation for easy testing and reasoning.
"""
