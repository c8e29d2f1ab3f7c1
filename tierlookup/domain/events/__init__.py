"""Domain Event definitions.

Represents significant occurrences in the request pipeline that other parts
of the system might react to. Currently they are only dispatched to the log.
"""
