from webcanvas.action.dispatcher.dispatcher import ActionDispatcher

__all__ = ['ActionDispatcher']
