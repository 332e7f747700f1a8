"""
zkid: proof-input generation for identity-disclosure circuits.

Document records are serialized into fixed-width buffers, committed into an
append-only Merkle accumulator, screened against sanctions trees and turned
into the signal mappings consumed by zero-knowledge circuits.
"""

__version__ = "0.1.0"
