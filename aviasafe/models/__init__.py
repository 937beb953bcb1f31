# aviasafe/models/__init__.py
from aviasafe.db.base import Base  # noqa: F401

from . import profile                # noqa: F401
from . import aircraft               # noqa: F401
from . import occurrence             # noqa: F401
from . import occurrence_assessment  # noqa: F401
from . import investigation          # noqa: F401
from . import interview              # noqa: F401
from . import communication          # noqa: F401
from . import attachment             # noqa: F401
from . import audit_event            # noqa: F401
