"""Test suite for strategic-planner."""
