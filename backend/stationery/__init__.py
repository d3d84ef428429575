"""Smart Stationery backend."""
