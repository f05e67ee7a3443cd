"""Real-time transport — WebSocket endpoint and per-connection outbox.

Learn: Events flow through two paths:
1. Client frame → rate limiter → CommandRouter (inbound, one at a time)
2. Entity → Connection.send() → outbox queue → writer task → WebSocket

Sends never await, so a broadcast to a whole channel (or a disconnect)
can't stall on one slow peer.
"""
