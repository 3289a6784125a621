from .hashmap import Comparator, HashMap
from .keys import DEFAULT_KINDS, KeyDescriptor, KeyKind, KeyStrategy, identity_token
from .errors import (
    StdlibError,
    ConstructionError,
    CanonicalizationError,
)
