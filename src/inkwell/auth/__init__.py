"""Authentication and authorization.

Learn: Users log in with email/password and receive two JWTs:
1. Access token → short-lived, sent as Authorization: Bearer on each request
2. Refresh token → long-lived, only ever travels in an HttpOnly cookie

The access token's claims (sub, email, role) are the caller identity for
the Role Authorizer; no database lookup is needed per request.
"""
