__title__ = 'sargparse'
__author__ = 'sargparse developers'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

from .values import *
from .arguments import *
from .parser import *
from .faults import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the typed values
__all__ += values.__all__  # type: ignore[attr-defined]
# Load the exposed API of the argument declarations
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parser
__all__ += parser.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
