"""
Result-based error handling used throughout crlset.

Every stage returns a Result instead of raising; failures carry an ErrorCode
and, for decode errors, the name of the field that was truncated.

    from crlset.railway import Result, ErrorCode

    parse_crlset(data).map(lambda crlset: crlset.header.sequence)
"""

from crlset.railway.assertions import ResultAssertions
from crlset.railway.failure import ErrorCode, FailureDescription, RailwayError
from crlset.railway.result import Failure, Result, Success

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "RailwayError",
    "ResultAssertions",
]
