"""Network clients: base HTTP layer and the Starknet contract client."""
