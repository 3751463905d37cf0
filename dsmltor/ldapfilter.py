"""
Parse RFC 4515 string filters, eg. C{(&(objectClass=person)(cn=j*))},
into the filter values of L{dsmltor.protocols.pureldap}.

        filter         = "(" filtercomp ")"
        filtercomp     = and / or / not / item
        and            = "&" filterlist
        or             = "|" filterlist
        not            = "!" filter
        filterlist     = 1*filter
        item           = simple / present / substring / extensible
        simple         = attr filtertype assertionvalue
        filtertype     = equal / approx / greaterorequal / lessorequal
        extensible     = ( attr [dnattrs] [matchingrule] ":=" assertionvalue )
                         / ( [dnattrs] matchingrule ":=" assertionvalue )
        present        = attr "=*"
        substring      = attr "=" [initial] any [final]
"""

from pyparsing import (
    CharsNotIn,
    Forward,
    Group,
    Literal,
    OneOrMore,
    Optional,
    ParseException,
    Regex,
    StringEnd,
    StringStart,
    Suppress,
    ZeroOrMore,
)

from dsmltor._encoder import to_unicode
from dsmltor.protocols import pureldap


class InvalidLDAPFilter(Exception):
    def __init__(self, msg, loc, text):
        Exception.__init__(self)
        self.msg = msg
        self.loc = loc
        self.text = text

    def __str__(self):
        return "Invalid LDAP filter: %s at point %d in %r" % (
            self.msg,
            self.loc,
            self.text,
        )


def _p_value(s, l, t):
    """
    Join plain text and \\XX escapes; consecutive escapes are decoded
    together as UTF-8.
    """
    r = ""
    pending = b""
    for token in t:
        if isinstance(token, bytes):
            pending += token
            continue
        if pending:
            r += pending.decode("utf-8", "surrogateescape")
            pending = b""
        r += token
    if pending:
        r += pending.decode("utf-8", "surrogateescape")
    return r


attr = Regex(r"[A-Za-z][A-Za-z0-9;\-]*|[0-9]+(\.[0-9]+)*(;[A-Za-z0-9\-]+)*")
attr.set_name("attr")

escaped = Regex(r"\\[0-9A-Fa-f]{2}")
escaped.set_parse_action(lambda s, l, t: bytes((int(t[0][1:], 16),)))
escaped.set_name("escaped")

value = OneOrMore(CharsNotIn("*()\\\0") | escaped).leave_whitespace()
value.set_parse_action(_p_value)
value.set_name("value")

_simpleTypes = {
    "=": pureldap.LDAPFilter_equalityMatch,
    "~=": pureldap.LDAPFilter_approxMatch,
    ">=": pureldap.LDAPFilter_greaterOrEqual,
    "<=": pureldap.LDAPFilter_lessOrEqual,
}
filtertype = Literal("~=") | Literal(">=") | Literal("<=") | Literal("=")
filtertype.set_name("filtertype")

simple = attr + filtertype + value
simple.set_parse_action(
    lambda s, l, t: _simpleTypes[t[1]](attributeDesc=t[0], assertionValue=t[2])
)
simple.set_name("simple")

present = attr + Suppress(Literal("=*"))
present.set_parse_action(lambda s, l, t: pureldap.LDAPFilter_present(t[0]))
present.set_name("present")

initial = value.copy()
initial.add_parse_action(lambda s, l, t: pureldap.LDAPFilter_substrings_initial(t[0]))
any_value = value.copy()
any_value.add_parse_action(lambda s, l, t: pureldap.LDAPFilter_substrings_any(t[0]))
final = value.copy()
final.add_parse_action(lambda s, l, t: pureldap.LDAPFilter_substrings_final(t[0]))

substrings = Group(
    Optional(initial)
    + Suppress(Literal("*"))
    + ZeroOrMore(any_value + Suppress(Literal("*")))
    + Optional(final)
)
substring = attr + Suppress(Literal("=")) + substrings
substring.set_parse_action(
    lambda s, l, t: pureldap.LDAPFilter_substrings(type=t[0], substrings=list(t[1]))
)
substring.set_name("substring")

dnattrs = Optional(Literal(":dn"))
dnattrs.set_parse_action(lambda s, l, t: bool(t))
matchingrule = Suppress(Literal(":")) + attr

extensible_attr = (
    attr
    + dnattrs
    + Optional(matchingrule, default=None)
    + Suppress(Literal(":="))
    + value
)
extensible_attr.set_parse_action(
    lambda s, l, t: pureldap.LDAPFilter_extensibleMatch(
        type=t[0], dnAttributes=t[1], matchingRule=t[2], matchValue=t[3]
    )
)
extensible_noattr = dnattrs + matchingrule + Suppress(Literal(":=")) + value
extensible_noattr.set_parse_action(
    lambda s, l, t: pureldap.LDAPFilter_extensibleMatch(
        type=None, dnAttributes=t[0], matchingRule=t[1], matchValue=t[2]
    )
)
extensible = extensible_attr | extensible_noattr
extensible.set_name("extensible")

filter_ = Forward()
item = simple ^ present ^ substring ^ extensible
item.set_name("item")
not_ = Suppress(Literal("!")) + filter_
not_.set_parse_action(lambda s, l, t: pureldap.LDAPFilter_not(t[0]))
or_ = Suppress(Literal("|")) + OneOrMore(filter_)
or_.set_parse_action(lambda s, l, t: pureldap.LDAPFilter_or(list(t)))
and_ = Suppress(Literal("&")) + OneOrMore(filter_)
and_.set_parse_action(lambda s, l, t: pureldap.LDAPFilter_and(list(t)))
filtercomp = and_ | or_ | not_ | item
filter_ <<= Suppress(Literal("(")) + filtercomp + Suppress(Literal(")"))
filter_.set_name("filter")

for _element in (attr, simple, present, substring, extensible_attr,
                 extensible_noattr, item, filtercomp, filter_):
    _element.leave_whitespace()

toplevel = StringStart() + filter_ + StringEnd()
toplevel.leave_whitespace()


def parseFilter(s):
    """
    Convert a string filter to a pureldap filter value.

    @raise InvalidLDAPFilter: s is not a valid filter.
    """
    s = to_unicode(s).strip()
    try:
        x = toplevel.parse_string(s)
    except ParseException as e:
        raise InvalidLDAPFilter(e.msg, e.loc, e.line)
    assert len(x) == 1
    return x[0]
