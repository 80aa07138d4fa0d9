"""Browser-free unit tests for the UI framework and tools."""
