"""Parsing and advancing numbered image file paths."""

import os
import re
from dataclasses import dataclass

from bgsub.core import SequencePathError

_TRAILING_DIGITS = re.compile(r"([0-9]+)$")


@dataclass(frozen=True)
class SequenceCursor:
    """Position within a numbered image sequence.

    A path is split into three parts::

        "/a/b/007.png" -> prefix="/a/b/", stem="007", suffix=".png"
        "/seq/img1.png" -> prefix="/seq/img", stem="1", suffix=".png"

    ``prefix`` is everything up to and including the last path separator
    (``/`` or ``\\``) plus any non-digit text that leads the file name.
    ``stem`` is the trailing run of digits before the last ``.`` and
    ``suffix`` runs from that ``.`` to the end.
    """

    prefix: str
    stem: str
    suffix: str

    @classmethod
    def parse(cls, path: str | os.PathLike) -> "SequenceCursor":
        """Split *path* into prefix, numeric stem and suffix.

        Raises:
            SequencePathError: If the file name carries no number.
        """
        text = os.fspath(path)
        sep = max(text.rfind("/"), text.rfind("\\"))
        head, name = text[: sep + 1], text[sep + 1:]

        dot = name.rfind(".")
        if dot == -1:
            base, suffix = name, ""
        else:
            base, suffix = name[:dot], name[dot:]

        match = _TRAILING_DIGITS.search(base)
        if match is None:
            raise SequencePathError(
                f"Image file name has no frame number: {text!r} "
                "(expected something like '/data/images/1.png')"
            )
        return cls(
            prefix=head + base[: match.start()],
            stem=match.group(1),
            suffix=suffix,
        )

    @property
    def index(self) -> int:
        return int(self.stem)

    @property
    def path(self) -> str:
        return f"{self.prefix}{self.stem}{self.suffix}"

    def advance(self, preserve_padding: bool = False) -> "SequenceCursor":
        """Return the cursor for the next frame number.

        Leading zeros are dropped unless *preserve_padding* is set, in
        which case the new stem keeps at least the current stem's width.
        """
        stem = str(self.index + 1)
        if preserve_padding:
            stem = stem.zfill(len(self.stem))
        return SequenceCursor(prefix=self.prefix, stem=stem, suffix=self.suffix)
