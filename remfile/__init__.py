"""Reading reminder files written in the REM notation."""

# Copyright (c) 2018 Antoni Boucher.
# Copyright (c) 2020 Aubrey Barnard.
#
# This is free software released under the MIT License
# (https://choosealicense.com/licenses/mit/).


from .reminders import (
    Date,
    Entry,
    Month,
    OnError,
    ParseError,
    Parser,
    ReadError,
    Time,
    lines,
    load,
    parse,
    parse_line,
    parse_unsigned,
    results,
    words,
)
