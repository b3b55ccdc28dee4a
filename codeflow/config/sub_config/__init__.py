"""Config sections. Importing this package registers every section."""

from codeflow.config.sub_config import general  # noqa: F401
