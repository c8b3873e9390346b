"""Values DeFi venue positions across Cosmos chains in USD and ATOM."""
