"""Credentials and session tokens.

Learn: Two primitives the Auth service is built on:
1. PasswordHasher → bcrypt hash/verify of passwords
2. TokenIssuer → signed JWT session tokens carrying uid/email/role

dependencies.py turns a Bearer token back into claims for route guards.
"""
