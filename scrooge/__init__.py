"""
Scrooge - UTXO ledger-consistency validator.

Given a pool of unspent outputs and a batch of proposed transactions,
accepts the transactions that are well-formed, authorized by the owners
of the outputs they spend and non-conflicting in submission order, and
updates the pool accordingly.
"""

__version__ = "0.1.0"
