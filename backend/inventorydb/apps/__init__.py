"""Feature apps: accounts, catalog, inventory."""
