"""Test suite for the routechain package.

This package contains unit and integration tests validating route
parsing, request building, response validation, variable chaining and
fail-fast execution of route lists.
"""
