import operator


def _folded(compare):
    def method(self, other):
        if isinstance(other, str):
            return compare(self.lower(), other.lower())
        return compare(str(self), other)
    return method


class InsensitiveString(str):
    """
    A str subclass that performs all matching without regard to case.

    Attribute type names and option names are kept as the user wrote
    them but compare, sort and hash case-insensitively.
    """

    __eq__ = _folded(operator.eq)
    __ne__ = _folded(operator.ne)
    __lt__ = _folded(operator.lt)
    __le__ = _folded(operator.le)
    __gt__ = _folded(operator.gt)
    __ge__ = _folded(operator.ge)

    def __hash__(self):
        return hash(self.lower())

    def __contains__(self, other):
        if isinstance(other, str):
            return other.lower() in self.lower()
        return super().__contains__(other)
