"""Numeric process exit codes used by the ``disauth`` command.

Each constant maps to an error category and is referenced by the
corresponding :class:`~disauth.exceptions.DisauthError` subclass, so shell
scripts can branch on the failure class without parsing stderr.

Example::

    $ disauth exchange bad-code
    Error: POST https://discord.com/api/v10/oauth2/token failed with status 400 (invalid_grant)
    $ echo $?
    3
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or the configuration is invalid."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""The OAuth endpoints rejected the request."""

EXIT_HTTP_ERROR = 5
"""A REST call returned a non-2xx status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
