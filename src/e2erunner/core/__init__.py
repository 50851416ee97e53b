"""Core building blocks: config, I/O utilities, lifecycle registry, ports, processes."""
