"""Channel access control.

Learn: Private channels store a bcrypt hash of their password. Joining
one goes through a PasswordVerifier — an injected capability, so tests
can swap in a deterministic verifier instead of real bcrypt.
"""
