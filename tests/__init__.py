"""Tests for fnr."""
