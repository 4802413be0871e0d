"""
Adversarial Tests - Robustness of the transaction handler.

Tests verify:
1. Transaction flood handling
2. Double-spend races within and across batches
3. Value conservation over long batches
4. Forged and replayed authorizations
"""

import pytest
import secrets
import time

from scrooge.crypto import generate_keypair, sha256
from scrooge.core.state import (
    UTXO,
    Transaction,
    TxHandler,
    TxInput,
    TxOutput,
    UTXOPool,
    create_coinbase,
    create_transfer,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="module")
def keypair():
    return generate_keypair()


@pytest.fixture(scope="module")
def attacker():
    return generate_keypair()


@pytest.fixture
def funded(keypair):
    """Pool with a single 100000 output owned by ``keypair``."""
    pool = UTXOPool()
    (utxo,) = pool.add_transaction(create_coinbase(keypair.public_key, 100000))
    return pool, utxo


def total_value(pool: UTXOPool) -> int:
    return pool.stats()["total_value"]


# =============================================================================
# Transaction Flood Tests
# =============================================================================

class TestTransactionFlood:
    """Test handling of transaction spam."""

    def test_invalid_tx_rejection_rate(self, funded, keypair):
        """Transactions claiming unknown UTXOs are rejected cheaply."""
        pool, _ = funded
        handler = TxHandler(pool)

        invalid_txs = []
        for _ in range(100):
            tx = Transaction(
                inputs=[TxInput(secrets.token_bytes(32), 0, bytes(64))],
                outputs=[TxOutput(100, keypair.public_key)],
            )
            tx.finalize()
            invalid_txs.append(tx)

        start = time.time()
        accepted = handler.handle_txs(invalid_txs)
        elapsed = time.time() - start

        assert accepted == []
        assert handler.get_utxo_pool() == pool
        assert elapsed < 1.0, f"Rejection too slow: {elapsed:.2f}s for 100 txs"

    def test_double_spend_flood(self, funded, keypair):
        """Many spends of one UTXO: exactly the first is accepted."""
        pool, utxo = funded
        handler = TxHandler(pool)

        recipient = generate_keypair().public_key
        txs = [
            create_transfer([(utxo, keypair.private_key)], [(recipient, 100000 - i)])
            for i in range(10)
        ]

        accepted = handler.handle_txs(txs)

        assert accepted == [txs[0]]
        result = handler.get_utxo_pool()
        assert result.get_balance(recipient) == 100000


# =============================================================================
# Forgery Tests
# =============================================================================

class TestForgery:
    """Authorization must come from the pool's recorded owner."""

    def test_attacker_signature_rejected(self, funded, attacker):
        pool, utxo = funded
        handler = TxHandler(pool)
        theft = create_transfer([(utxo, attacker.private_key)], [(attacker.public_key, 1)])
        assert handler.handle_txs([theft]) == []

    def test_signature_transplanted_to_other_outputs(self, funded, keypair, attacker):
        """A valid signature cannot be reused with redirected outputs."""
        pool, utxo = funded
        handler = TxHandler(pool)
        honest = create_transfer([(utxo, keypair.private_key)], [(keypair.public_key, 100000)])

        hijacked = Transaction(
            inputs=list(honest.inputs),
            outputs=[TxOutput(100000, attacker.public_key)],
        )
        hijacked.finalize()

        assert handler.handle_txs([hijacked, honest]) == [honest]

    def test_signature_transplanted_to_other_input(self, keypair):
        """A signature for one UTXO does not authorize a sibling UTXO."""
        pool = UTXOPool()
        u_a, u_b = pool.add_transaction(_two_output_coinbase(keypair.public_key))
        handler = TxHandler(pool)

        signed = create_transfer([(u_a, keypair.private_key)], [(keypair.public_key, 5)])
        forged = Transaction(
            inputs=[TxInput(u_b.tx_hash, u_b.index, signed.inputs[0].signature)],
            outputs=list(signed.outputs),
        )
        forged.finalize()

        assert not handler.is_valid_tx(forged)
        assert handler.is_valid_tx(signed)

    def test_replay_after_acceptance(self, funded, keypair):
        """Resubmitting an accepted transaction in a later epoch fails."""
        pool, utxo = funded
        handler = TxHandler(pool)
        tx = create_transfer([(utxo, keypair.private_key)], [(keypair.public_key, 99999)])

        assert handler.handle_txs([tx]) == [tx]
        assert handler.handle_txs([tx]) == []


# =============================================================================
# Conservation Tests
# =============================================================================

class TestConservation:
    """Total value never increases across a batch."""

    def test_chain_of_transfers(self, funded, keypair):
        pool, utxo = funded
        handler = TxHandler(pool)

        txs = []
        current, value = utxo, 100000
        for _ in range(5):
            value -= 10
            tx = create_transfer([(current, keypair.private_key)], [(keypair.public_key, value)])
            txs.append(tx)
            current = UTXO(tx.tx_hash, 0)

        accepted = handler.handle_txs(txs)

        assert accepted == txs
        result = handler.get_utxo_pool()
        assert result.get_all_utxos() == [current]
        assert total_value(result) == 100000 - 50

    def test_inflation_attempts_never_raise_supply(self, funded, keypair):
        pool, utxo = funded
        handler = TxHandler(pool)

        txs = [
            create_transfer([(utxo, keypair.private_key)], [(keypair.public_key, 100001)]),
            create_transfer(
                [(utxo, keypair.private_key)],
                [(keypair.public_key, 100000), (keypair.public_key, 1)],
            ),
            create_transfer(
                [(utxo, keypair.private_key)],
                [(keypair.public_key, 100002), (keypair.public_key, -2)],
            ),
        ]

        assert handler.handle_txs(txs) == []
        assert total_value(handler.get_utxo_pool()) == 100000

    def test_same_utxo_twice_in_one_tx(self, funded, keypair):
        pool, utxo = funded
        handler = TxHandler(pool)
        tx = create_transfer(
            [(utxo, keypair.private_key), (utxo, keypair.private_key)],
            [(keypair.public_key, 150000)],
        )
        assert not handler.is_valid_tx(tx)


def _two_output_coinbase(owner: bytes) -> Transaction:
    tx = Transaction()
    tx.add_output(5, owner)
    tx.add_output(5, owner)
    tx.tx_hash = sha256(b"two-output-coinbase")
    return tx


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
