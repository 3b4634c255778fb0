"""
Library for reading reminder files written in the REM notation and
working with the reminder entries they contain.


Reminder Files
--------------

A reminder file is a plain-text list of events, one per line.  Each
line starts with the `REM` keyword and gives the date of the event, the
time it starts, how long it lasts, and a message describing it.  For
example, the following lines describe an evening event and a short one
the week after.

```
REM Mar 30 2018 AT 19:00 DURATION 1:15 MSG Event name
REM Apr 9 2018 AT 12:50 DURATION 0:15 MSG Super Event
```

Keywords (`REM`, `AT`, `DURATION`, `MSG`) and month abbreviations are
matched regardless of case, so `rem mar 30 2018 at 19:00 ...` is the
same entry as the first line above.  Everything after `MSG` is the
message.  Its words are kept as written but rejoined with single
spaces.

Reading is tolerant.  A line that does not match the format (a blank
line, a comment, a typo in a keyword) is skipped and reading continues
with the next line.  What happens to a skipped line can be chosen with
an error policy (see `OnError`).  Only a failure to read the input
itself stops the whole read.

Numbers are not checked against the calendar or the clock.  A day of 99
or an hour of 30 is read as is.


Grammar
-------

```
# A word is a maximal run of non-whitespace characters.  Words are
# separated by any amount of whitespace.
<word> ::= (!<whitespace>)+

<entry> ::= "REM" <date> <time> <duration> <message>

<date> ::= <month> <day> <year>

# Case-insensitive three-letter abbreviations
<month> ::=
    | "jan" | "feb" | "mar" | "apr" | "may" | "jun"
    | "jul" | "aug" | "sep" | "oct" | "nov" | "dec"

# Unsigned decimal numbers, with an optional leading "+"
<day> ::= <number>
<year> ::= <number>
<number> ::= "+"? <digit>+

<time> ::= "AT" <time-literal>
<duration> ::= "DURATION" <time-literal>

# Anything after the second colon is ignored
<time-literal> ::= <number> ":" <number> (":" <any>)*

<message> ::= "MSG" <word>*
```
"""


# Copyright (c) 2018 Antoni Boucher.
# Copyright (c) 2020 Aubrey Barnard.
#
# This is free software released under the MIT License
# (https://choosealicense.com/licenses/mit/).


from enum import Enum
import datetime
import io
import logging
import re


_logger = logging.getLogger(__name__)


# Errors


class ParseError(Exception):

    kind = 'Parse error'

    def __init__(
            self,
            filename=None,
            line=None,
            word=None,
            text=None,
            message=None,
    ):
        super().__init__(message)
        self.filename = filename
        self.line = line
        self.word = word
        self.text = text
        self.message = message

    def __str__(self):
        pieces = [self.kind]
        if self.filename is not None:
            pieces.append(f' in {self.filename!r}')
        if self.line is not None:
            pieces.append(f' at line {self.line}')
        if self.word is not None:
            pieces.append(' at' if self.line is None else ',')
            pieces.append(f' word {self.word}')
        if self.message is not None:
            pieces.append(': ')
            pieces.append(self.message)
        if self.text is not None:
            pieces.append(': ')
            pieces.append(f'{self.text!r}')
        return ''.join(pieces)


class ReadError(ParseError):
    """The input could not be read or decoded."""

    kind = 'Read error'


# Records


class Month(Enum):
    january = 0
    february = 1
    march = 2
    april = 3
    may = 4
    june = 5
    july = 6
    august = 7
    september = 8
    october = 9
    november = 10
    december = 11

    @property
    def abbreviation(self):
        return self.name[:3]

    @classmethod
    def from_abbreviation(cls, text):
        return _months_by_abbreviation.get(text.lower())


_months_by_abbreviation = {month.abbreviation: month for month in Month}


class Record:

    def __eq__(self, other):
        return (type(self) is type(other)
                and self.__dict__ == other.__dict__)

    def __hash__(self):
        return hash((type(self), tuple(self.__dict__.values())))


class Date(Record):

    def __init__(self, day, month, year):
        self._day = day
        self._month = month
        self._year = year

    @property
    def day(self):
        return self._day

    @property
    def month(self):
        return self._month

    @property
    def year(self):
        return self._year

    def __repr__(self):
        return f'Date({self._day!r}, {self._month!s}, {self._year!r})'


class Time(Record):

    def __init__(self, hour, minute):
        self._hour = hour
        self._minute = minute

    @property
    def hour(self):
        return self._hour

    @property
    def minute(self):
        return self._minute

    def as_duration(self):
        return datetime.timedelta(
            seconds=self._hour * 60 * 60 + self._minute * 60)

    def __repr__(self):
        return f'Time({self._hour!r}, {self._minute!r})'


class Entry(Record):
    """
    A reminder: when it starts, how long it lasts, and what it is
    about.
    """

    def __init__(self, date, time, duration, msg):
        self._date = date
        self._time = time
        self._duration = duration
        self._msg = msg

    @property
    def date(self):
        return self._date

    @property
    def time(self):
        return self._time

    @property
    def duration(self):
        return self._duration

    @property
    def msg(self):
        return self._msg

    def __repr__(self):
        return (f'Entry({self._date!r}, {self._time!r}, '
                f'{self._duration!r}, {self._msg!r})')


# Words


# Any sequence of characters that are not Unicode whitespace.  The ASCII
# information separators (\x1c to \x1f) are not whitespace here.
_word_pattern = re.compile(
    '[^'
    # ASCII space, tab, and line breaks
    ' \t\n\v\f\r'
    # Unicode
    '\u0085' # Next line (NEL)
    '\u00a0' # Non-breaking space
    '\u1680' # Ogham space mark
    '\u2000-\u200a' # En quad through hair space
    '\u2028' # Line separator
    '\u2029' # Paragraph separator
    '\u202f' # Non-breaking narrow space
    '\u205f' # Mathematical space
    '\u3000' # Ideographic space, CJK cell width
    ']+'
)

_unsigned_pattern = re.compile(r'[0-9]+')


def words(line):
    return _word_pattern.findall(line)


def parse_unsigned(text, bits):
    """
    Parse `text` as a base 10 unsigned integer that fits in `bits`
    bits.

    An optional leading "+" is allowed.  Raises `ValueError` otherwise.
    """
    if not text:
        raise ValueError('cannot parse integer from empty string')
    digits = text[1:] if text.startswith('+') else text
    if _unsigned_pattern.fullmatch(digits) is None:
        raise ValueError('invalid digit found in string')
    # Compare lengths first so huge numerals never reach `int`
    digits = digits.lstrip('0') or '0'
    if len(digits) > len(str(2 ** bits - 1)):
        raise ValueError('number too large to fit in target type')
    value = int(digits)
    if value >= 2 ** bits:
        raise ValueError('number too large to fit in target type')
    return value


# Parsing

# Each line is parsed on its own with a fresh `Parser`.  The grammar
# methods consume words left to right, without backtracking, and raise
# `ParseError` on the first problem.  Whether a failed line matters is
# decided by the driver (`parse`), not here.
#
# The messages for a mismatched keyword and for a missing minute are
# the same as for a missing "REM" and a missing hour.  Callers may match
# on them, so they are kept.


class Parser:

    def __init__(self, line, filename=None, line_number=None):
        self._words = words(line)
        self._index = 0
        self._filename = filename
        self._line_number = line_number

    def next_word(self):
        if self._index >= len(self._words):
            return None
        word = self._words[self._index]
        self._index += 1
        return word

    def rest(self):
        rest = self._words[self._index:]
        self._index = len(self._words)
        return rest

    def error(self, message, text=None):
        # Point at the word just consumed, or nowhere at end of line
        word = self._index if text is not None else None
        return ParseError(
            self._filename, self._line_number, word, text, message)

    def entry(self):
        self.ident('REM')
        date = self.date()
        time = self.time()
        duration = self.duration()
        msg = self.message()
        return Entry(date, time, duration, msg)

    def ident(self, ident):
        word = self.next_word()
        if word is None or word.lower() != ident.lower():
            raise self.error('Expecting REM at beginning of line', word)

    def date(self):
        month = self.month()
        # Day and year keep only their low 8 and 16 bits
        day = self.num() % 2 ** 8
        year = self.num() % 2 ** 16
        return Date(day, month, year)

    def month(self):
        word = self.next_word()
        if word is None:
            raise self.error('Expecting date, found end of line')
        month = Month.from_abbreviation(word)
        if month is None:
            raise self.error(f'Invalid month {word.lower()}', word)
        return month

    def num(self):
        word = self.next_word()
        if word is None:
            raise self.error('Expecting day of month, found end of line')
        return self._unsigned(word, word, 32)

    def time(self):
        self.ident('AT')
        return self.time_literal()

    def duration(self):
        self.ident('DURATION')
        return self.time_literal().as_duration()

    def time_literal(self):
        word = self.next_word()
        if word is None:
            raise self.error('Expecting time, found end of line')
        parts = iter(word.split(':'))
        hour = self._time_part(parts, word)
        minute = self._time_part(parts, word)
        return Time(hour, minute)

    def _time_part(self, parts, word):
        part = next(parts, None)
        if part is None:
            raise self.error('Expecting hour, found end of line', word)
        return self._unsigned(part, word, 8)

    def _unsigned(self, text, word, bits):
        try:
            return parse_unsigned(text, bits)
        except ValueError as e:
            raise self.error(str(e), word) from e

    def message(self):
        self.ident('MSG')
        return ' '.join(self.rest())


def parse_line(line, filename=None, line_number=None):
    return Parser(line, filename, line_number).entry()


# Reading


class OnError:
    """What to do with a line that could not be parsed."""

    @staticmethod
    def skip(error):
        pass

    @staticmethod
    def log(error):
        _logger.warning('Skipping line: %s', error)

    @staticmethod
    def raise_error(error):
        raise error


def lines(file, filename=None, encoding='utf-8'):
    """
    Yield the lines of `file` without their line terminators.

    `file` can be a binary or text file, any iterable of `bytes` or
    `str` lines, or a whole `bytes` or `str` text.  Lines end at "\\n"
    and a trailing "\\r" is removed.  Raises `ReadError` if reading
    fails or a line does not decode.
    """
    if isinstance(file, bytes):
        file = io.BytesIO(file)
    elif isinstance(file, str):
        file = io.StringIO(file)
    line_number = 0
    iterator = iter(file)
    while True:
        try:
            line = next(iterator)
        except StopIteration:
            return
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(
                filename, line_number + 1, message=str(e)) from e
        line_number += 1
        if isinstance(line, bytes):
            try:
                line = line.decode(encoding)
            except UnicodeDecodeError as e:
                raise ReadError(
                    filename, line_number, message=str(e)) from e
        if line.endswith('\n'):
            line = line[:-1]
        if line.endswith('\r'):
            line = line[:-1]
        yield line


def results(file, filename=None, encoding='utf-8'):
    """
    Yield `(line_number, result)` pairs for the lines of `file`, where
    each result is either an `Entry` or the `ParseError` explaining why
    the line is not one.
    """
    for line_number, line in enumerate(
            lines(file, filename, encoding), start=1):
        try:
            result = parse_line(line, filename, line_number)
        except ParseError as e:
            result = e
        yield line_number, result


def parse(file, filename=None, encoding='utf-8', on_error=OnError.skip):
    """
    Return the list of entries in `file` in the order they appear.

    Lines that are not entries are given to `on_error`, which by
    default ignores them.  A `ReadError` aborts the whole parse.
    """
    if not callable(on_error):
        raise TypeError(f'`on_error` is not a callable: {on_error!r}')
    entries = []
    n_skipped = 0
    for _, result in results(file, filename, encoding):
        if isinstance(result, ParseError):
            n_skipped += 1
            on_error(result)
        else:
            entries.append(result)
    _logger.debug('Parsed %d entries from %s, skipped %d lines',
                  len(entries), filename or '<input>', n_skipped)
    return entries


def load(path, on_error=OnError.skip, encoding='utf-8'):
    with open(path, 'rb') as file:
        return parse(file, str(path), encoding, on_error)
