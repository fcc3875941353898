"""StockFlow inventory service."""
