from decimal import Decimal, InvalidOperation

from .api import ParseError


def _is_missing(s):
    return s is None or (isinstance(s, str) and not s.strip())


def parse_int(s, required=False, minimum: int = None, maximum: int = None, **_):
    if _is_missing(s):
        if required:
            raise ParseError('Missing integer value')
        return None
    if isinstance(s, bool):
        raise ParseError('Invalid integer value: "{}"'.format(s))
    s = str(s).strip()
    try:
        s = int(s)
    except ValueError:
        raise ParseError('Invalid integer value: "{}"'.format(s))
    if minimum is not None and s < minimum:
        raise ParseError(f'Value must be greater than or equal to {minimum}')
    if maximum is not None and s > maximum:
        raise ParseError(f'Value must be less than or equal to {maximum}')
    return s


def parse_str(s, required=False, max_length=1000, **_):
    s = str(s or '')[:max_length].strip()
    if not s and required:
        raise ParseError('Missing string value')
    return s


def parse_bool(s, required=False, **_):
    if _is_missing(s):
        if required:
            raise ParseError('Missing boolean value')
        return None
    if isinstance(s, bool):
        return s
    s = str(s).lower()
    if s in ('true', '1', 'yes'):
        return True
    if s in ('false', '0', 'no'):
        return False
    raise ParseError('Invalid boolean value: "{}"'.format(s))


def parse_choices(choices, s, required=False, **_):
    if _is_missing(s):
        if required:
            raise ParseError('Missing choice value')
        return None
    s = str(s)
    try:
        return getattr(choices, s)
    except AttributeError:
        raise ParseError('Invalid choice: "{}"'.format(s))


def parse_decimal(s, required=False, **_):
    """Parse any finite numeric value, sign checks are left to the caller."""
    if _is_missing(s):
        if required:
            raise ParseError('Missing numeric value')
        return None
    if isinstance(s, bool):
        raise ParseError('Invalid numeric value: "{}"'.format(s))
    s = str(s).strip()
    try:
        d = Decimal(s)
    except InvalidOperation:
        raise ParseError('Invalid numeric value: "{}"'.format(s))
    if not d.is_finite():
        raise ParseError('Invalid numeric value: "{}"'.format(s))
    return d


def parse_money(s, required=False, allow_zero=False, **_):
    d = parse_decimal(s, required=required)
    if d is None:
        return None
    if d < 0 or not allow_zero and d == 0:
        raise ParseError('Only positive values are allowed for monetary values.')
    return d
