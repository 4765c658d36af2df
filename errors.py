# errors.py


class PagingError(Exception):
    """Base class for every error raised by the paging simulator."""


class InvalidConfig(PagingError, ValueError):
    """A size, count or policy name was rejected before the run started."""


class KeyNotFound(PagingError, KeyError):
    """A (job, page) pair that was never registered was looked up."""

    def __str__(self):
        # KeyError repr()s its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class InternalInconsistency(PagingError, AssertionError):
    """The frame table and page table disagree, or a policy was misused."""


class PageNotResident(PagingError, LookupError):
    """Translation was requested for a page that is not loaded in a frame."""
