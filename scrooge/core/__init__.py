"""Ledger core: configuration and UTXO state"""
