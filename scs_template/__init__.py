"""Spring Cloud Stream code-generation model for AsyncAPI documents."""
from __future__ import annotations

from scs_template.shared.constants import VERSION

__version__ = VERSION
