from .classify import *
from .consts import *
from .errors import *
from .ops import *
from .packing import *
from .script import *

_version_str = '0.1'
_version = tuple(int(part) for part in _version_str.split('.'))

__all__ = sum((
    classify.__all__,
    consts.__all__,
    errors.__all__,
    ops.__all__,
    packing.__all__,
    script.__all__,
), ())
