"""Lifecycle store commands: inspect, clean and sweep recorded runs."""
