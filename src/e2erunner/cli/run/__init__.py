"""Run commands: run identifiers and test mode switches."""
