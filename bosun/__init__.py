__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'bosun'
__author__ = 'Bosun contributors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .builder import *
from .completion import *
from .context import *
from .dispatcher import *
from .faults import *
from .hosting import *
from .nodes import *
from .parameters import *
from .registry import *
from .reporting import *
from .workers import *

# Library logging stays silent until the host configures handlers.
__import__("logging").getLogger(__name__).addHandler(__import__("logging").NullHandler())

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of every module (`builder` itself is shadowed by the
# builder() factory, so modules are fetched by name).
for module in (
    "builder",
    "completion",
    "context",
    "dispatcher",
    "faults",
    "hosting",
    "nodes",
    "parameters",
    "registry",
    "reporting",
    "workers",
):
    __all__ += __import__(f"{__name__}.{module}", fromlist=("__all__",)).__all__

del module
