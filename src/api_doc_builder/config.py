"""Defaults for the command line; each can be overridden from the environment."""

DEFAULT_TITLE = "API"
DEFAULT_VERSION = "1.0.0"
DEFAULT_FORMAT = "json"

OUTPUT_FORMATS = ("json", "yaml")

ENV_TITLE = "API_DOC_TITLE"
ENV_VERSION = "API_DOC_VERSION"
ENV_DESCRIPTION = "API_DOC_DESCRIPTION"
ENV_HOST = "API_DOC_HOST"
ENV_BASE_PATH = "API_DOC_BASE_PATH"
