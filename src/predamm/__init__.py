"""predamm - constant-product pricing and liquidity engine for prediction markets."""

__version__ = "0.1.0"
