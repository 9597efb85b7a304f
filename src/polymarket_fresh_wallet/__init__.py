"""Fresh-wallet risk classification for prediction-market surveillance."""

__version__ = "0.1.0"
