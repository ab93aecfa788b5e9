"""Tick-driven simulation of an IT support desk."""
