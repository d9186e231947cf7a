"""Utility functions for client output."""


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count with a binary unit (B, KiB, MiB, GiB, TiB).
    
    Args:
        size_bytes: Size in bytes
        
    Returns:
        Formatted string (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    
    size = size_bytes / 1024.0
    for unit in ('KiB', 'MiB', 'GiB'):
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    
    return f"{size:.2f} TiB"
