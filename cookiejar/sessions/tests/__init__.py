"""Tests for :mod:`cookiejar.sessions`."""
