"""Service layer.

Layout
------
- ``_shared``: errors, ports (hexagonal interfaces) and the service base.
- ``auth``: bearer parsing, refresh token lifecycle and :class:`SessionManager`.
- ``identity``: user registration and credential updates.

Nothing is re-exported here: the ports are imported by the repositories, and
the services import the repositories, so an eager import would be circular.
"""
