"""Service identity constants shared across clients."""

from importlib.metadata import PackageNotFoundError, version

SERVICE_NAME = "yodaai"

try:
    SERVICE_VERSION = version(SERVICE_NAME)
except PackageNotFoundError:
    SERVICE_VERSION = "0.0.0"

USER_AGENT = f"{SERVICE_NAME}/{SERVICE_VERSION}"
