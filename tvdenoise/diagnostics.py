# -*- coding: utf-8 -*-
# Copyright (C) 2026 by tvdenoise Developers
# All rights reserved. BSD 3-clause License.
# This file is part of the tvdenoise package. Details of the copyright and
# user license can be found in the 'LICENSE' file distributed with the
# package.

"""Diagnostic information for iterative algorithms."""

import re
import warnings
from collections import namedtuple
from typing import Dict, List, Optional, Sequence

# Decomposition of a printf-style format string into flags, width,
# precision and conversion type
_FORMAT_RE = re.compile(r"%(\+?-?)((?:\d+)?)(\.?)((?:\d+)?)([a-z])")


class IterationStats:
    """Display and record statistics of an iterative algorithm.

    Each call to :meth:`insert` records one row of values, which is
    stored as a namedtuple and, if display is enabled, printed as a row
    of a table whose header is printed before the first row.
    """

    def __init__(
        self,
        fields: Dict[str, str],
        ident: Optional[Dict[str, str]] = None,
        display: bool = False,
        period: int = 1,
        colsep: int = 2,
    ):
        """
        The `fields` dict maps field names to printf-style format
        strings, and its insertion order determines the column order.
        Column widths are the maximum of the header string length and
        the width embedded in the format string. For '%e' formats the
        width should be at least the precision plus 6 (plus 7 if negative
        values are possible).

        Args:
            fields: A dictionary associating field names with format
                strings for displaying the corresponding values.
            ident: A dictionary associating field names with valid
                identifiers for the namedtuple used to record results.
                Field names without an entry are converted to identifiers
                by replacing non-word characters with underscores.
            display: Flag indicating whether results should be printed
                to stdout.
            period: Only display one result in every cycle of length
                `period`.
            colsep: Number of spaces separating fields in displayed
                tables.

        Raises:
            TypeError: If the `fields` parameter is not a dict.
            ValueError: If a format string cannot be parsed.
        """
        if not isinstance(fields, dict):
            raise TypeError("Parameter fields must be an instance of dict")
        self.period = period
        self.colsep = colsep
        self.display = display
        self.iterations: List = []
        self.fieldname: List[str] = []
        self.fieldformat: List[str] = []
        self.fieldlength: List[int] = []
        tuplefields = []

        for name, fmt in fields.items():
            match = _FORMAT_RE.match(fmt)
            if not match:
                raise ValueError(f'Format string "{fmt}" could not be parsed')
            flags, width, dot, precision, ftype = match.groups()
            flen = len(fmt % 0)
            if width != "" and flen > int(width):
                warnings.warn(
                    f'Actual length {flen} of format "{fmt}" for field '
                    f'"{name}" is longer than specified value {width}',
                    stacklevel=2,
                )
            # widen the column to the header length if necessary
            if flen < len(name):
                fmt = f"%{flags}{len(name)}{dot}{precision}{ftype}"
                flen = len(name)
            self.fieldname.append(name)
            self.fieldformat.append(fmt)
            self.fieldlength.append(flen)
            if ident is not None and name in ident:
                tuplefields.append(ident[name])
            else:
                tuplefields.append(re.sub(r"\W+|^(?=\d)", "_", name).strip("_"))

        self.headlength = sum(self.fieldlength) + colsep * (len(self.fieldlength) - 1)
        self.IterTuple = namedtuple("IterationStatsTuple", tuplefields)  # type: ignore
        self.disphdr: Optional[str] = None
        if display:
            self.disphdr = self.header()

    def header(self) -> str:
        """Table header string, consisting of a line of field names
        followed by a separator line.
        """
        names = (" " * self.colsep).join(
            ["%-*s" % (fl, fn) for fl, fn in zip(self.fieldlength, self.fieldname)]
        )
        return names + "\n" + "-" * self.headlength

    def format(self, values: Sequence) -> str:
        """Format a row of values as a table row string."""
        return (" " * self.colsep).join(self.fieldformat) % tuple(values)

    def insert(self, values: Sequence):
        """Insert a list of values for a single iteration.

        Args:
            values: Statistics for a single iteration.
        """
        self.iterations.append(self.IterTuple(*values))
        if self.display:
            if self.disphdr is not None:
                print(self.disphdr)
                self.disphdr = None
            if (len(self.iterations) - 1) % self.period == 0:
                print(self.format(values))

    def history(self, transpose: bool = False):
        """Retrieve record of all inserted iterations.

        Args:
            transpose: Flag indicating whether results should be returned
                in "transposed" form, i.e. as a namedtuple of lists
                rather than a list of namedtuples.

        Returns:
            list of namedtuple or namedtuple of lists: Record of all
            inserted iterations.
        """
        if transpose:
            return self.IterTuple(
                *[[row[n] for row in self.iterations] for n in range(len(self.fieldname))]
            )
        return self.iterations
