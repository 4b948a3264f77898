from .cache import Epoch, ResponseCache, make_key

__all__ = ['Epoch', 'ResponseCache', 'make_key']
