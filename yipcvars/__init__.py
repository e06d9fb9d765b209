"""
yipcvars - Configuration variables for the Yip CMS database.

Controls the cvars table: the fixed epoch, the lastmod counter, the
administrator authorization settings and the administration script paths.
"""

from .controller import CvarController, mode_for_verb
from .validation import parse_request

try:
    from importlib.metadata import version

    __version__ = version("yipcvars")
except Exception:
    __version__ = "0.0.0"

__all__ = ["CvarController", "mode_for_verb", "parse_request"]
