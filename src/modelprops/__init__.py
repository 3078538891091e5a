"""modelprops - typed model properties.

Value coercion, validation, storage mapping and display rendering for
the typed properties of content models.
"""

import logging

from modelprops.shared.constants import Application

__version__ = Application.VERSION

# Silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["__version__"]
