"""
Transaction - State transition in the Scrooge ledger.

Conceptual Background:
---------------------
A Transaction consumes inputs (UTXOs) and creates outputs (new UTXOs).

The fundamental invariant is value conservation:
    sum(inputs.value) >= sum(outputs.value)

Any surplus is an implicit fee that nobody is explicitly paid.

Each input references a specific UTXO and provides:
- The UTXO identifier (prev_tx_hash + output_index)
- A signature authorizing the spend

Signing:
-------
Input i signs its own signing payload:

    prev_tx_hash || output_index || outputs

The payload never contains a signature, so signing the inputs in any
order yields the same payloads, and a verifier can rebuild the exact
bytes that were signed from the transaction alone.

Identity:
--------
tx_hash = SHA256(raw tx), where the raw tx includes every signature.
It is computed by finalize() once all inputs are signed, and becomes
the tx_hash of every UTXO the transaction creates.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple, Union

from scrooge.crypto import sha256, sign_message, short_hex
from scrooge.core.state.utxo import UTXO
from scrooge.utils.validation import (
    MAX_OWNER_SIZE,
    MAX_SIGNATURE_SIZE,
    validate_amount,
    validate_bytes,
    validate_hash,
    validate_index,
)


# =============================================================================
# Input Reference
# =============================================================================


@dataclass(frozen=True)
class TxInput:
    """
    A transaction input - reference to a UTXO being spent.

    Attributes:
        prev_tx_hash: Transaction that created the UTXO
        output_index: Index in that transaction's outputs
        signature: Signature authorizing the spend (empty until signed)
    """
    prev_tx_hash: bytes   # 32 bytes
    output_index: int
    signature: bytes = b""

    def __post_init__(self):
        for valid, error in (
            validate_hash(self.prev_tx_hash, "prev_tx_hash"),
            validate_index(self.output_index, "output_index"),
            validate_bytes(self.signature, "signature", max_length=MAX_SIGNATURE_SIZE),
        ):
            if not valid:
                raise ValueError(error)

    @property
    def utxo(self) -> UTXO:
        """The UTXO this input claims."""
        return UTXO(self.prev_tx_hash, self.output_index)

    def to_bytes(self) -> bytes:
        """Serialize input: prev_tx_hash || output_index(4) || sig_len(2) || signature"""
        return (
            self.prev_tx_hash +
            self.output_index.to_bytes(4, byteorder="big") +
            len(self.signature).to_bytes(2, byteorder="big") +
            self.signature
        )


# =============================================================================
# Output
# =============================================================================


@dataclass(frozen=True)
class TxOutput:
    """
    A transaction output - value assigned to an owner.

    Once its transaction is accepted the same record becomes the pool entry
    for UTXO(tx_hash, index).

    Attributes:
        value: Amount in minor units
        owner: Owner public key (opaque to the ledger)
    """
    value: int
    owner: bytes

    def __post_init__(self):
        valid, error = validate_amount(self.value)
        if not valid:
            raise ValueError(error)
        valid, error = validate_bytes(self.owner, "owner", max_length=MAX_OWNER_SIZE)
        if not valid:
            raise ValueError(error)
        if not isinstance(self.owner, bytes):
            object.__setattr__(self, "owner", bytes(self.owner))

    def to_bytes(self) -> bytes:
        """Serialize output: value(8, signed) || owner_len(2) || owner"""
        return (
            self.value.to_bytes(8, byteorder="big", signed=True) +
            len(self.owner).to_bytes(2, byteorder="big") +
            self.owner
        )

    def __repr__(self) -> str:
        return f"TxOutput(value={self.value}, owner={short_hex(self.owner)})"


# =============================================================================
# Transaction
# =============================================================================


@dataclass
class Transaction:
    """
    A state transition that consumes inputs and creates outputs.

    Attributes:
        inputs: List of TxInputs being spent
        outputs: List of TxOutputs being created
        tx_hash: Hash of the transaction (set by finalize())
    """
    inputs: List[TxInput] = field(default_factory=list)
    outputs: List[TxOutput] = field(default_factory=list)
    tx_hash: bytes = field(default=b"")

    # =========================================================================
    # Construction
    # =========================================================================

    def add_input(self, prev_tx_hash: bytes, output_index: int) -> None:
        """Append an unsigned input claiming (prev_tx_hash, output_index)."""
        self.inputs.append(TxInput(prev_tx_hash, output_index))

    def add_output(self, value: int, owner: bytes) -> None:
        """Append an output paying ``value`` to ``owner``."""
        self.outputs.append(TxOutput(value, owner))

    def remove_input(self, which: Union[int, UTXO]) -> None:
        """
        Remove an input by position or by the UTXO it claims.

        Removing a claimed UTXO that no input references is a no-op.
        """
        if isinstance(which, UTXO):
            self.inputs = [inp for inp in self.inputs if inp.utxo != which]
        else:
            del self.inputs[which]

    def add_signature(self, signature: bytes, index: int) -> None:
        """Attach ``signature`` to input ``index``."""
        if not 0 <= index < len(self.inputs):
            raise IndexError(f"Input index {index} out of range")
        self.inputs[index] = replace(self.inputs[index], signature=signature)

    def sign_input(self, index: int, private_key: bytes) -> None:
        """
        Sign a specific input.

        Args:
            index: Which input to sign
            private_key: Private key of the input's UTXO owner
        """
        signature = sign_message(self.get_raw_data_to_sign(index), private_key)
        self.add_signature(signature, index)

    # =========================================================================
    # Accessors
    # =========================================================================

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return len(self.outputs)

    def get_input(self, index: int) -> TxInput:
        return self.inputs[index]

    def get_output(self, index: int) -> TxOutput:
        return self.outputs[index]

    def total_output_value(self) -> int:
        """Sum of all output values."""
        return sum(out.value for out in self.outputs)

    # =========================================================================
    # Signing Payload / Hash
    # =========================================================================

    def _outputs_bytes(self) -> bytes:
        return b"".join(out.to_bytes() for out in self.outputs)

    def get_raw_data_to_sign(self, index: int) -> bytes:
        """
        Canonical bytes that input ``index`` signs.

        Format: prev_tx_hash || output_index(4) || outputs
        """
        if not 0 <= index < len(self.inputs):
            raise IndexError(f"Input index {index} out of range")
        inp = self.inputs[index]
        return (
            inp.prev_tx_hash +
            inp.output_index.to_bytes(4, byteorder="big") +
            self._outputs_bytes()
        )

    def get_raw_tx(self) -> bytes:
        """Canonical bytes of the whole transaction, signatures included."""
        return b"".join(inp.to_bytes() for inp in self.inputs) + self._outputs_bytes()

    def compute_tx_hash(self) -> bytes:
        return sha256(self.get_raw_tx())

    def finalize(self) -> None:
        """Compute and set the transaction hash."""
        self.tx_hash = self.compute_tx_hash()

    @property
    def is_finalized(self) -> bool:
        return bool(self.tx_hash)

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_structure(
        self,
        max_inputs: Optional[int] = None,
        max_outputs: Optional[int] = None,
    ) -> Tuple[bool, str]:
        """
        Validate structural limits (not state).

        Field-level constraints are enforced when inputs and outputs are
        constructed; this only checks counts and the hash length.
        """
        if max_inputs is not None and len(self.inputs) > max_inputs:
            return False, f"Too many inputs: {len(self.inputs)} > {max_inputs}"
        if max_outputs is not None and len(self.outputs) > max_outputs:
            return False, f"Too many outputs: {len(self.outputs)} > {max_outputs}"
        if self.tx_hash:
            valid, error = validate_hash(self.tx_hash, "tx_hash")
            if not valid:
                return False, error
        return True, ""

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation (hex-encoded bytes)."""
        return {
            "hash": self.tx_hash.hex(),
            "inputs": [
                {
                    "prev_tx_hash": inp.prev_tx_hash.hex(),
                    "output_index": inp.output_index,
                    "signature": inp.signature.hex(),
                }
                for inp in self.inputs
            ],
            "outputs": [
                {"value": out.value, "owner": out.owner.hex()}
                for out in self.outputs
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """
        Rebuild a transaction from ``to_dict()`` output.

        A missing or empty ``hash`` is recomputed from the content.

        Raises:
            ValueError: If a supplied ``hash`` does not match the content
        """
        tx = cls(
            inputs=[
                TxInput(
                    prev_tx_hash=bytes.fromhex(inp["prev_tx_hash"]),
                    output_index=inp["output_index"],
                    signature=bytes.fromhex(inp.get("signature", "")),
                )
                for inp in data.get("inputs", [])
            ],
            outputs=[
                TxOutput(value=out["value"], owner=bytes.fromhex(out["owner"]))
                for out in data.get("outputs", [])
            ],
        )
        tx.finalize()
        claimed = data.get("hash")
        if claimed and bytes.fromhex(claimed) != tx.tx_hash:
            raise ValueError(f"Transaction hash {claimed} does not match its content")
        return tx

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        tx_id = short_hex(self.tx_hash) if self.tx_hash else "unfinalized"
        return f"Transaction(id={tx_id}, inputs={len(self.inputs)}, outputs={len(self.outputs)})"


# =============================================================================
# Factory Functions
# =============================================================================


def create_transfer(
    inputs: List[Tuple[UTXO, bytes]],      # List of (utxo, private_key)
    recipients: List[Tuple[bytes, int]],   # List of (owner, value)
) -> Transaction:
    """
    Create a signed, finalized transfer transaction.

    Args:
        inputs: List of (UTXO, private_key) tuples
        recipients: List of (owner public key, value) tuples

    Returns:
        Signed Transaction

    Note: nothing here checks value conservation or ownership; that is
    the handler's job.
    """
    tx = Transaction()
    for utxo, _ in inputs:
        tx.add_input(utxo.tx_hash, utxo.index)
    for owner, value in recipients:
        tx.add_output(value, owner)

    for i, (_, private_key) in enumerate(inputs):
        tx.sign_input(i, private_key)

    tx.finalize()
    return tx


def create_coinbase(owner: bytes, value: int) -> Transaction:
    """
    Create a coinbase transaction (no inputs, mints one output).

    Coinbase transactions seed initial pools (see UTXOPool.add_transaction).
    Submitted in a batch, one with a positive value is rejected: it has no
    inputs to cover its output.
    """
    tx = Transaction()
    tx.add_output(value, owner)
    tx.finalize()
    return tx
