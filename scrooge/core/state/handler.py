"""
TxHandler - transaction validation and epoch processing.

Conceptual Background:
---------------------
The handler owns the ledger's UTXO pool. Given a batch of proposed
transactions it decides which are individually valid and jointly
non-conflicting, and updates the pool with only the accepted ones.

Validation (per transaction, against the pool as it stands):
-----------------------------------------------------------
1. Every claimed UTXO is in the current pool
2. Every input signature verifies against the pool's recorded owner
3. No UTXO is claimed twice by the same transaction
4. Every output value is non-negative
5. sum(input values) >= sum(output values)

Checks run in that order and stop at the first failure; the signature
check needs the claimed outputs to exist.

Epoch Processing:
----------------
Transactions are considered strictly in submission order. Each accepted
transaction immediately removes its inputs from the pool and adds its
outputs, so a later transaction in the same batch that claims an
already-spent UTXO fails the existence check. Acceptance is never
revisited: earlier wins.

Rejections are not reported to the caller. They are logged at DEBUG
with the failing check.
"""

from typing import List, Optional, Sequence, Tuple

from scrooge.crypto import SignatureVerifier, short_hex, verify_signature
from scrooge.core.config import LedgerConfig
from scrooge.core.state.pool import PoolInvariantError, UTXOPool
from scrooge.core.state.transaction import Transaction
from scrooge.core.state.utxo import UTXO
from scrooge.utils.logger import get_logger

logger = get_logger("handler")


class TxHandler:
    """
    Public ledger over a privately owned UTXO pool.

    Attributes:
        verifier: Signature predicate (public_key, message, signature) -> bool
        config: Structural limits for submitted batches
    """

    def __init__(
        self,
        utxo_pool: UTXOPool,
        verifier: SignatureVerifier = verify_signature,
        config: Optional[LedgerConfig] = None,
    ):
        """
        Create a handler whose pool is an independent copy of ``utxo_pool``.

        The caller's pool is never mutated.
        """
        self._pool = UTXOPool(utxo_pool)
        self.verifier = verifier
        self.config = config or LedgerConfig()

    # =========================================================================
    # State Access
    # =========================================================================

    def get_utxo_pool(self) -> UTXOPool:
        """Copy of the current pool."""
        return UTXOPool(self._pool)

    # =========================================================================
    # Validation
    # =========================================================================

    def is_valid_tx(self, tx: Transaction) -> bool:
        """
        True iff ``tx`` passes all five checks against the current pool.

        Never raises for an invalid transaction and never mutates the pool.
        """
        return self.check_tx(tx)[0]

    def check_tx(self, tx: Transaction) -> Tuple[bool, str]:
        """
        Run the validity checks, returning (is_valid, reason).

        The reason names the first failing check; it is empty when valid.
        """
        claimed = [inp.utxo for inp in tx.inputs]

        # 1. Existence
        for i, utxo in enumerate(claimed):
            if not self._pool.contains(utxo):
                return False, f"Input {i}: UTXO not in pool"

        # 2. Authorization against the pool's recorded owner
        for i, (inp, utxo) in enumerate(zip(tx.inputs, claimed)):
            owner = self._pool.get_tx_output(utxo).owner
            if not self._verify(owner, tx.get_raw_data_to_sign(i), inp.signature):
                return False, f"Input {i}: invalid signature"

        # 3. No UTXO claimed twice
        seen = set()
        for i, utxo in enumerate(claimed):
            if utxo in seen:
                return False, f"Input {i}: UTXO claimed more than once"
            seen.add(utxo)

        # 4. Non-negative outputs
        for i, out in enumerate(tx.outputs):
            if out.value < 0:
                return False, f"Output {i}: negative value {out.value}"

        # 5. Conservation
        input_sum = sum(self._pool.get_tx_output(utxo).value for utxo in claimed)
        output_sum = tx.total_output_value()
        if input_sum < output_sum:
            return False, f"Outputs exceed inputs: {output_sum} > {input_sum}"

        return True, ""

    def _verify(self, owner: bytes, message: bytes, signature: bytes) -> bool:
        # A verifier that chokes on malformed input has not verified anything.
        try:
            return bool(self.verifier(owner, message, signature))
        except Exception as e:
            logger.debug(f"Verifier raised {type(e).__name__}: {e}")
            return False

    # =========================================================================
    # Epoch Processing
    # =========================================================================

    def handle_txs(self, possible_txs: Sequence[Transaction]) -> List[Transaction]:
        """
        Process one epoch of proposed transactions.

        Each transaction is validated against the pool as updated by the
        transactions accepted before it in this batch. Transactions past
        ``max_batch_size`` or over the per-transaction input/output limits
        are rejected like any other invalid transaction.

        Args:
            possible_txs: Candidate transactions, in priority order

        Returns:
            Accepted transactions, in their original relative order

        Raises:
            ValueError: If a transaction is not finalized or its hash does
                not match its content. Raised before the pool is touched.
            PoolInvariantError: If an accepted transaction would mint a
                UTXO already in the pool. The offending transaction leaves
                the pool untouched.
        """
        self._check_batch(possible_txs)

        accepted: List[Transaction] = []
        for position, tx in enumerate(possible_txs):
            is_valid, reason = self._check_limits(position, tx)
            if is_valid:
                is_valid, reason = self.check_tx(tx)
            if not is_valid:
                logger.debug(f"Rejected tx {short_hex(tx.tx_hash)}: {reason}")
                continue

            self._apply(tx)
            accepted.append(tx)
            logger.debug(
                f"Accepted tx {short_hex(tx.tx_hash)} "
                f"({len(tx.inputs)} in, {len(tx.outputs)} out)"
            )

        logger.info(
            f"Epoch processed: {len(accepted)}/{len(possible_txs)} accepted, "
            f"pool size {len(self._pool)}"
        )
        return accepted

    def _check_batch(self, possible_txs: Sequence[Transaction]) -> None:
        for i, tx in enumerate(possible_txs):
            if not tx.is_finalized:
                raise ValueError(f"Transaction {i} is not finalized")
            if tx.tx_hash != tx.compute_tx_hash():
                raise ValueError(f"Transaction {i} hash does not match its content")

    def _check_limits(self, position: int, tx: Transaction) -> Tuple[bool, str]:
        if position >= self.config.max_batch_size:
            return False, f"Beyond batch limit of {self.config.max_batch_size}"
        return tx.validate_structure(
            max_inputs=self.config.max_inputs_per_tx,
            max_outputs=self.config.max_outputs_per_tx,
        )

    def _apply(self, tx: Transaction) -> List[UTXO]:
        # Collisions are found before any input is removed.
        spent = {inp.utxo for inp in tx.inputs}
        for i in range(len(tx.outputs)):
            minted = UTXO(tx.tx_hash, i)
            if minted in self._pool and minted not in spent:
                raise PoolInvariantError(f"UTXO already in pool: {minted!r}")

        for utxo in spent:
            self._pool.remove_utxo(utxo)
        return self._pool.add_transaction(tx)

    def __repr__(self) -> str:
        return f"TxHandler(pool={self._pool!r})"
