"""taskgate — multi-tenant task tracking behind a stateless token gate.

Accounts register and log in with a username and password, receive a
signed token (cookie or bearer), and manage their own tasks. Every
protected request re-resolves the token's subject to a live account.
"""

__version__ = "0.1.0"
