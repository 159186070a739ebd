"""StockPOS access-control service."""
