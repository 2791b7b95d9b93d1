"""调试与复盘工具."""
