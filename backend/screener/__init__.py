"""perp-screener: Binance perpetual futures screener with live WebSocket snapshots."""
