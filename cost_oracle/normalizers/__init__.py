from .orderbook_normalizer import OrderbookNormalizer

__all__ = ["OrderbookNormalizer"]
