"""Command-line front end: ``file``, ``group`` and ``user`` commands.

Handlers here parse lists, wire services around the loaded backend and
render results with Rich.  Nothing outside this package imports it.
"""
