"""Gas relayer: settles signed gas-price positions on a Uniswap v4 hook."""

__version__ = "2.0.0"
