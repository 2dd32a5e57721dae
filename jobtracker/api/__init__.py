"""
HTTP and WebSocket routers.
"""
