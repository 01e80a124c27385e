# mixinkit

Building blocks for working with the Mixin Network from Python, written in
pure Python with `msgpack` as the only dependency:

- Ed25519 group arithmetic, keys and signatures in the network's format
- ghost (one-time) key derivation and main network `XIN...` addresses
- SHA3-256 and BLAKE3 transaction hashes
- binary encoding and decoding of kernel transactions (versions 2 to 5, plus
  the older msgpack form), transaction building and signing
- a small JSON-RPC client for kernel nodes
- NFO memos for minting collectibles
- messenger helpers: PIN checks, TIP signatures, request signatures, session
  checksums, message categories and `mixin://` links

## Installation

```
pip install mixinkit
```

To run the test suite from a checkout:

```
pip install ".[test]"
pytest
```

## Keys and signatures

`mixinkit.mixinnet.keys` has `Key` (32 bytes) and `Signature` (64 bytes),
both `bytes` subclasses whose `str()` is hex.

```python
from mixinkit.mixinnet.keys import generate_key, key_from_string

key = generate_key()              # random bytes come from os.urandom by default
public = key.public()
signature = key.sign(b"hello")
assert public.verify(b"hello", signature)
```

`generate_key(rng)` takes any callable `rng(n)` that returns `n` bytes.
`key_from_string` accepts 32 hex-encoded bytes, or a 64-byte Ed25519 private
key (seed followed by public key), as `generate_ed25519_key()` returns.
`key_from_seed`, `key_from_bytes` and `parse_key_with_pub` cover the other
forms. Ghost keys are derived with `derive_ghost_public_key`,
`derive_ghost_private_key` and `view_ghost_output_key`.

## Addresses

```python
from mixinkit.mixinnet.address import address_from_public_spend, address_from_string
from mixinkit.mixinnet.keys import key_from_string

spend = key_from_string("d03ac2718891838840c55f681b6b049af5b9efbf0d7d2a06d6741bbc17f68262")
address = address_from_public_spend(spend)
text = str(address)               # "XIN..."
same = address_from_string(text)  # only the public keys are filled in
```

`generate_address()` makes a new key pair, and `Address.create_utxo` builds a
single-key output paying an amount to the address.

## Transactions

`Transaction.from_raw` decodes a hex-encoded kernel transaction and
`Transaction.dump` encodes it again; `Transaction.transaction_hash` gives the
hash the network uses (BLAKE3 from version 3, SHA3-256 before).

```python
from mixinkit.mixinnet.transaction import Transaction

tx = Transaction.from_raw(raw_hex)
print(tx.transaction_hash())
print(tx.dump())
```

Malformed data raises `DecodeError`, a `ValueError`. The lower-level
`Encoder` (in `mixinkit.mixinnet.encoding`) and `Decoder` work on the parts of
the wire format directly.

`TransactionInput` (in `mixinkit.mixinnet.transaction_input`) collects
`InputUTXO` entries, outputs and a memo; `validate()` checks that assets match,
amounts balance and limits are kept, and `build()` returns the unsigned
`Transaction`. `safe_sign_transaction(tx, spend_key, views, k)` from
`mixinkit.transaction_signer` then adds, for each input, the signature at
signer index `k` made with the sum of that input's view key and the spend key.

## Talking to a kernel node

```python
from mixinkit.mixinnet.rpc import Client, Config

client = Client(Config(safe=True))
info = client.read_consensus_info()
tx = client.get_transaction(tx_hash)
utxo = client.get_utxo(tx_hash, 0)
sent = client.send_raw_transaction(raw_hex)
```

Each call picks a random host from the configuration unless `host=` is given.
`Client` also accepts a `timeout` and a `transport` callable
`(url, body, timeout) -> (status, reason, body)`; the default uses
`urllib`. `verify_transaction(addr, tx_hash)` tells whether every input of a
transaction was a single-key output belonging to an address.

Errors reported by nodes are raised as `MixinNetError` (in
`mixinkit.mixinnet.errors`); `is_error_codes(err, *codes)` tests their codes.

## NFO memos

```python
from mixinkit.nft.mint import build_mint_nfo, decode_nfo_memo

memo = build_mint_nfo(collection_id, 1, meta_hash)
decoded = decode_nfo_memo(memo)
assert decoded.will_mint()
```

## Messenger helpers

- `mixinkit.pin.validate_pin_pattern` accepts a six-digit PIN or a hex TIP key
  of 32 or 64 bytes; `pad_new_pin` appends the counter sent with a new TIP key.
- `mixinkit.tip.tip_body` and `sign_tip` build and sign TIP action bodies.
- `mixinkit.signing.sign_raw` and `trim_url_host` build request signatures.
- `mixinkit.session` has `Session`, `generate_session_checksum`,
  `is_encrypted_message_supported` and the `PLAIN_`/`ENCRYPTED_` category
  helpers.
- `mixinkit.utils.unique_conversation_id` derives the conversation id shared
  by two users; `uuid_hash`, `new_uuid`, `random_pin` and `random_trace_id`
  make identifiers and fresh values.
- `mixinkit.url_scheme.URL` (a `UrlScheme`) builds `mixin://` links:
  `users`, `transfer`, `pay`, `codes`, `snapshots`, `conversations`, `apps`
  and `send`.

## What this package does not do

It has no client for the Messenger HTTP API: it does not create users, read
assets or snapshots, send transfers or messages, or hold OAuth sessions, and
it has no websocket connection. It does not encrypt or decrypt message bodies;
only the category names and session checksum are provided. The only network
access is the kernel node RPC client, and there is no command-line program.