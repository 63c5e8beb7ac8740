"""
crlset: CRLSet download and inspection tools.

Fetches the signed container that carries the current CRLSet, unwraps it,
and decodes the CRLSet itself: the JSON header with its policy SPKI lists
and the body of revoked serials grouped by issuer SPKI hash.

Built on Result-based error handling (crlset.railway): decoders report
truncation with the exact field that ran short instead of raising.
"""

__version__ = "0.1.0"
