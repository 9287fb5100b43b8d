"""Runtime package.

Keep this module dependency-light: the client side imports settings from here
and must not pull in the server stack.
"""

__all__: list[str] = []
