"""
MathBot - local math tutor relay

FastAPI service that forwards tutoring conversations to a local Ollama
server and streams the reply back as server-sent events, plus an async
client that consumes that stream.
"""

__version__ = "0.1.0"
