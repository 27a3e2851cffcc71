"""Package version shared by the API and the CLI."""

APP_VERSION = "0.1.0"
