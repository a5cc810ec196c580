"""
Tool calling layer for the VoIPmonitor support assistant.

Each VoIPmonitor operation is a Tool with a host-agnostic definition, so the
same tools can be listed over MCP or as OpenAI function schemas.
"""
