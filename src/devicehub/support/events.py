class EventSource(object):
    """
    A list of handlers that are each invoked with the arguments passed to fire().

    Handlers are called in registration order on the caller's thread. The handler
    list is copied before dispatch so a handler may remove itself while being notified.
    """

    def __init__(self):
        self._handlers = []

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def __len__(self):
        return len(self._handlers)

    def add(self, handler):
        self._handlers.append(handler)
        return self

    def remove(self, handler):
        if handler in self._handlers:
            self._handlers.remove(handler)
        return self

    def clear(self):
        del self._handlers[:]

    def handlers(self):
        return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        for handler in self.handlers():
            handler(*args, **kwargs)

    def fire_all(self, events):
        for e in events:
            self.fire(e)
