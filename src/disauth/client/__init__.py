"""OAuth/REST clients for disauth.

Classes:
    :class:`Client` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.

Both share request construction and error mapping through
:class:`~disauth.client.base.BaseClient` and accept the same configuration.

Example::

    from disauth.client import Client

    with Client(config) as client:
        user = client.get_user(access_token)
"""

from disauth.client.async_client import AsyncClient
from disauth.client.base import BaseClient
from disauth.client.sync_client import Client

__all__ = ["AsyncClient", "BaseClient", "Client"]
