from .allocator import MAX_PORT, find_available_port, is_port_occupied

__all__ = ["MAX_PORT", "find_available_port", "is_port_occupied"]
