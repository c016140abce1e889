# zeroledger

The core pieces of a leaderless DAG consensus for a payments ledger, as a
plain Python library.

- `zeroledger.types`: frozen value types `Transfer` (`sender`, `receiver`,
  `amount`, `nonce`, `signature`), `BlockRef` and `Event`. Sizes and ranges
  are checked on construction and a `ValueError` is raised if they are wrong.
  `Transfer.signing_bytes()` gives the 72 signed bytes and
  `Transfer.to_storage_bytes()` adds the signature to them.
- `zeroledger.hashing`: `blake3_hash`, `transfer_hash` and `chain_block_hash`.
  BLAKE3 is written in pure Python here.
- `zeroledger.keypair`: `KeyPair` covers Ed25519 keys, with `generate`,
  `from_secret`, `sign`, `sign_transfer`, `public_key`, `secret_key` and
  `verifying_key`.
- `zeroledger.verify`: `verify_transfer` raises `InvalidSignatureError` when
  the signature is bad and `CryptoError` when the key is malformed.
- `zeroledger.keyfile`: `generate_and_save(path)` writes a secret key as hex
  and `load(path)` reads it back. Any failure raises `KeyFileError`.
- `zeroledger.committee`: `ValidatorInfo` and `Committee`. The committee
  covers total stake, the 2/3+ quorum threshold, lookup by key and index, and
  fee shares.
- `zeroledger.dag`: `Dag` inserts events. Each insert returns an
  `InsertResult` whose `status` is an `InsertStatus`: inserted, duplicate or
  equivocation. `try_finalize(committee)` finalizes an event once validators
  holding 2/3+ of the stake have built on it. Old rounds are pruned as they
  fall behind.
- `zeroledger.trust`: `TrustScorer` tracks validator trust with rewards and
  penalties. `ejection_candidates()` picks validators to eject. The constants
  live in `TrustParams`.
- `zeroledger.validator`: `ValidatorState` collects pending transfers and
  batches them into events that it inserts into the DAG. It can also produce
  heartbeat events, and it keeps each batch until that event is finalized.
- `zeroledger.gossip`: gossip message types (`GossipEvent`, `GossipAck`,
  `PullRequest`, `PullResponse`, …). It has `encode_gossip_event` and
  `decode_gossip_event`, which raises `GossipDecodeError`. `GossipServer`
  passes pushed and pulled events to a `GossipHandler` that you implement.
  `GossipClient` holds the list of peers.
- `zeroledger.watcher`: `VaultWatcher` tracks deposits and releases per token
  over a 24-hour window. It reports anomalies, each paired with a
  `WatcherAction` (log, alert or pause). The anomalies are large releases,
  rapid releases, tier thresholds being crossed and net outflow.

## Installation

```
pip install zeroledger
```

## Example

```python
import dataclasses

from zeroledger.committee import Committee, ValidatorInfo
from zeroledger.dag import Dag
from zeroledger.keypair import KeyPair
from zeroledger.types import Transfer
from zeroledger.validator import ValidatorState
from zeroledger.verify import verify_transfer

sender = KeyPair.generate()
receiver = KeyPair.generate()

tx = Transfer(sender=sender.public_key(), receiver=receiver.public_key(), amount=100, nonce=1)
tx = dataclasses.replace(tx, signature=sender.sign_transfer(tx))
verify_transfer(tx)  # raises InvalidSignatureError if the signature is bad

committee = Committee([ValidatorInfo(index=0, public_key=sender.public_key(), stake=100)])
dag = Dag()
validator = ValidatorState(0, dag, committee, 100)
validator.submit_transfer(tx)
event = validator.try_produce_event(1000)
print(event.round, len(event.transactions))  # 1 1
```

### Gossip encoding

```python
from zeroledger.gossip import decode_gossip_event, encode_gossip_event

msg = encode_gossip_event(event, [tx])
decoded_event, transfers = decode_gossip_event(msg)
```

### Watching a vault

```python
from zeroledger.watcher import VaultWatcher, WatcherConfig

watcher = VaultWatcher(WatcherConfig(), window_start=0)
watcher.update_total_locked("USDC", 10_000_000)
for anomaly, action in watcher.record_release("USDC", 6_000_000, "0xabc", 1000):
    print(anomaly, action)
```

## What it does not do

This is a library of building blocks, not a running node.

- There is no network transport. `GossipServer` works on message objects you
  pass in. `GossipClient` only holds the peer list and sends nothing.
- Transfers are never executed. The package has no account balances, no
  ledger storage and no stake store.
- There is no event loop and there are no command-line programs.

## Running the tests

```
pip install "zeroledger[test]"
pytest
```