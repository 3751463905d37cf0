from copy import deepcopy

from dsmltor.insensitive import InsensitiveString


class LDAPAttribute(list):
    def __init__(self, key, *a, binary=False, **kw):
        """
        Represents all the values for an attribute in an LDAP entry. An entry
        might have "cn" or "objectClass" or "uid" attributes, and this class
        represents each of those.

        Values keep the order they were added in. A C{str} value is a
        string value, a C{bytes} value is a binary value.

        @param key: the attribute description, eg. "uid" or
            "userCertificate;binary".
        @type key: str
        @param args: values for this attribute, eg. ["jsmith"]
        @param binary: whether the attribute syntax is binary; values of
            binary attributes are always transferred base64 encoded.
        """
        if not key:
            raise ValueError("attribute identifier must not be empty")
        self.key = InsensitiveString(key)
        self.binary = binary
        super().__init__(*a, **kw)
        for value in self:
            self._check(value)

    @staticmethod
    def _check(value):
        if not isinstance(value, (str, bytes)):
            raise TypeError(
                "attribute values must be str or bytes, not %s"
                % type(value).__name__)

    def add(self, value):
        """Append a value, keeping insertion order."""
        self._check(value)
        self.append(value)
        return self

    def baseType(self):
        return InsensitiveString(self.key.split(';', 1)[0])

    def options(self):
        return [InsensitiveString(o) for o in self.key.split(';')[1:]]

    def isBinary(self):
        """
        Binary by syntax: flagged explicitly or carrying the
        ";binary" attribute option.
        """
        return self.binary or 'binary' in self.options()

    def __repr__(self):
        values = ', '.join([repr(x) for x in self])
        return '%s(%r, [%s])' % (
            self.__class__.__name__,
            str(self.key),
            values)

    def __eq__(self, other):
        """
        Note that LDAPAttributes can also be compared against any
        sequence. In that case the attribute key is ignored.
        """
        if isinstance(other, LDAPAttribute):
            if self.key != other.key:
                return False
            return list(self) == list(other)
        if not isinstance(other, (list, tuple)):
            return NotImplemented
        return list(self) == list(other)

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def copy(self):
        return self.__class__(self.key, self, binary=self.binary)

    __copy__ = copy

    def __deepcopy__(self, memo):
        result = self.__class__(self.key, binary=self.binary)
        memo[id(self)] = result
        result.extend(deepcopy(list(self), memo))
        return result
