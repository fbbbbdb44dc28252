from .navigation_loop import NavigationLoop

__all__ = ['NavigationLoop']
