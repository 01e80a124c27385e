"""Kernel primitives: hashes, curve keys, addresses, transaction encoding and RPC."""