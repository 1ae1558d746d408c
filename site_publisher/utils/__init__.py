"""Utility module for the static-site publisher.

This module provides cross-cutting utilities:
- Logging: Configured logging with password redaction
- Validators: Input validation for hosts, ports, timeouts, paths and names
"""
