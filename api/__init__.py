"""HTTP adapter for hours_tool."""
