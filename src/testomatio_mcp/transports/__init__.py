"""Transport adapters (stdio) for testomatio-mcp."""
