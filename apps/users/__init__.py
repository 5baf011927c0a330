"""Users app: accounts, roles and authentication endpoints."""
