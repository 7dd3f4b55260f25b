"""Authentication.

Learn: Stateless token auth for accounts:
1. Accounts → username/password → signed token (cookie and JSON body)
2. Every protected request → AuthGate → token verified → account re-loaded

The resolved Account is the identity every task query is scoped by.
"""
