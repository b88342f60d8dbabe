"""Tests for :mod:`cookiejar`."""
