"""roomchat — room-based real-time chat over WebSockets.

Clients join named channels (some password-gated), exchange messages
scoped to a channel, ask for live membership counts, and receive a
periodic per-channel stream of random numbers.
"""

__version__ = "0.1.0"
