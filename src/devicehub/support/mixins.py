import threading


class CommonEqualityMixin(object):
    """  a deep equals comparison for value objects. """
    local = threading.local()

    def __eq__(self, other):
        if not hasattr(CommonEqualityMixin.local, 'seen'):
            CommonEqualityMixin.local.seen = []
        seen = CommonEqualityMixin.local.seen
        return isinstance(other, self.__class__) and self._dicts_equal(other, seen)

    def _dicts_equal(self, other, seen):
        p = (id(self), id(other))
        if p in seen:
            raise ValueError("recursive comparison of %r" % (p,))
        try:
            seen.append(p)
            return self.__dict__ == other.__dict__
        finally:
            seen.pop()

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = None


class ReprMixin:
    """ renders the instance as ClassName(key=value, ...) with the attributes in key order. """

    def __repr__(self):
        items = ", ".join("%s=%r" % (k, v) for k, v in sorted(self.__dict__.items()) if not k.startswith('_'))
        return "%s(%s)" % (type(self).__name__, items)
