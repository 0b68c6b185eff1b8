"""shopbridge: commerce platform file storage and request verification.

Storage backends live in shopbridge.infrastructure.external.storage;
inbound request verification in shopbridge.infrastructure.security.
"""

__version__ = "0.1.0"
