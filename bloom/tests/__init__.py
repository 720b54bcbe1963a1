"""Tests for the bloom engine, session layer and API."""
