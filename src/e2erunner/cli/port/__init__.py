"""Port commands: find free ports, check occupancy, free ports."""
