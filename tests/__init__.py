"""
Ewald Test Suite

Tests for the Ewald summation implementation.
"""
