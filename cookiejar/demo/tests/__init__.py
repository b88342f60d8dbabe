"""Tests for :mod:`cookiejar.demo`."""
