"""
File schemas for the CLI.

Pool and batch files are JSON with hex-encoded bytes. They are parsed
with pydantic models and then converted to ledger types, so malformed
files fail with a readable error before anything is processed.

Pool file:
    {"utxos": [{"tx_hash": "..", "index": 0, "value": 10, "owner": ".."}]}

Batch file:
    {"transactions": [<Transaction.to_dict()>, ...]}
"""

from typing import List

from pydantic import BaseModel, Field, field_validator

from scrooge.core.state import UTXO, Transaction, TxOutput, UTXOPool
from scrooge.utils.validation import (
    HASH_SIZE,
    MAX_AMOUNT,
    MAX_INDEX,
    MIN_AMOUNT,
    validate_hex_string,
)


def _hex_field(value: str, name: str, expected_bytes=None) -> str:
    valid, error = validate_hex_string(value, name, expected_bytes)
    if not valid:
        raise ValueError(error)
    return value[2:] if value.startswith(("0x", "0X")) else value


class PoolEntryModel(BaseModel):
    tx_hash: str
    index: int = Field(ge=0, le=MAX_INDEX)
    value: int = Field(ge=MIN_AMOUNT, le=MAX_AMOUNT)
    owner: str

    @field_validator("tx_hash")
    @classmethod
    def _tx_hash_hex(cls, v: str) -> str:
        return _hex_field(v, "tx_hash", HASH_SIZE)

    @field_validator("owner")
    @classmethod
    def _owner_hex(cls, v: str) -> str:
        return _hex_field(v, "owner")


class PoolFileModel(BaseModel):
    utxos: List[PoolEntryModel] = Field(default_factory=list)

    def to_pool(self) -> UTXOPool:
        pool = UTXOPool()
        for entry in self.utxos:
            pool.add_utxo(
                UTXO(bytes.fromhex(entry.tx_hash), entry.index),
                TxOutput(entry.value, bytes.fromhex(entry.owner)),
            )
        return pool


class InputModel(BaseModel):
    prev_tx_hash: str
    output_index: int = Field(ge=0, le=MAX_INDEX)
    signature: str = ""

    @field_validator("prev_tx_hash")
    @classmethod
    def _prev_hex(cls, v: str) -> str:
        return _hex_field(v, "prev_tx_hash", HASH_SIZE)

    @field_validator("signature")
    @classmethod
    def _sig_hex(cls, v: str) -> str:
        return _hex_field(v, "signature")


class OutputModel(BaseModel):
    value: int = Field(ge=MIN_AMOUNT, le=MAX_AMOUNT)
    owner: str

    @field_validator("owner")
    @classmethod
    def _owner_hex(cls, v: str) -> str:
        return _hex_field(v, "owner")


class TransactionModel(BaseModel):
    hash: str = ""
    inputs: List[InputModel] = Field(default_factory=list)
    outputs: List[OutputModel] = Field(default_factory=list)

    @field_validator("hash")
    @classmethod
    def _hash_hex(cls, v: str) -> str:
        if not v:
            return v
        return _hex_field(v, "hash", HASH_SIZE)

    def to_transaction(self) -> Transaction:
        return Transaction.from_dict(self.model_dump())


class BatchFileModel(BaseModel):
    transactions: List[TransactionModel] = Field(default_factory=list)

    def to_transactions(self) -> List[Transaction]:
        return [tx.to_transaction() for tx in self.transactions]
