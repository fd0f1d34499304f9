"""Tests for the envocab package."""
