"""Cart and wishlist services."""
