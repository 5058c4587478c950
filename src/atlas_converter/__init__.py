"""atlas-converter: convert TexturePacker .plist atlases into engine JSON."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
