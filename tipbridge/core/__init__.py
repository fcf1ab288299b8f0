"""Settlement core: chain registry, models, wallets and the engine."""
