"""
Tool modules for the Testomat.io MCP server.

Every public coroutine whose first parameter is ``client`` is discovered by
``testomatio_mcp.core.registry`` and exposed as a tool. Modules prefixed with
an underscore hold shared helpers and are not scanned.
"""
