"""Tests for Guess the Word."""
