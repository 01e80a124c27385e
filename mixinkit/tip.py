"""TIP action bodies and their signatures."""

from __future__ import annotations

import hashlib

from .mixinnet.keys import Key, Signature

TIP_VERIFY = "TIP:VERIFY:"
TIP_ADDRESS_ADD = "TIP:ADDRESS:ADD:"
TIP_ADDRESS_REMOVE = "TIP:ADDRESS:REMOVE:"
TIP_USER_DEACTIVATE = "TIP:USER:DEACTIVATE:"
TIP_EMERGENCY_CONTACT_CREATE = "TIP:EMERGENCY:CONTACT:CREATE:"
TIP_EMERGENCY_CONTACT_READ = "TIP:EMERGENCY:CONTACT:READ:"
TIP_EMERGENCY_CONTACT_REMOVE = "TIP:EMERGENCY:CONTACT:REMOVE:"
TIP_PHONE_NUMBER_UPDATE = "TIP:PHONE:NUMBER:UPDATE:"
TIP_MULTISIG_REQUEST_SIGN = "TIP:MULTISIG:REQUEST:SIGN:"
TIP_MULTISIG_REQUEST_UNLOCK = "TIP:MULTISIG:REQUEST:UNLOCK:"
TIP_COLLECTIBLE_REQUEST_SIGN = "TIP:COLLECTIBLE:REQUEST:SIGN:"
TIP_COLLECTIBLE_REQUEST_UNLOCK = "TIP:COLLECTIBLE:REQUEST:UNLOCK:"
TIP_TRANSFER_CREATE = "TIP:TRANSFER:CREATE:"
TIP_WITHDRAWAL_CREATE = "TIP:WITHDRAWAL:CREATE:"
TIP_RAW_TRANSACTION_CREATE = "TIP:TRANSACTION:CREATE:"
TIP_OAUTH_APPROVE = "TIP:OAUTH:APPROVE:"
TIP_PROVISIONING_UPDATE = "TIP:PROVISIONING:UPDATE:"
TIP_APP_OWNERSHIP_TRANSFER = "TIP:APP:OWNERSHIP:TRANSFER:"
TIP_SEQUENCER_REGISTER = "SEQUENCER:REGISTER:"


def tip_body(action: str, *args: str) -> bytes:
    """SHA-256 of the action followed by its parameters."""
    h = hashlib.sha256(action.encode())
    for param in args:
        h.update(param.encode())
    return h.digest()


def sign_tip(key: Key, action: str, *args: str) -> Signature:
    """Sign the TIP body of ``action`` with the private TIP key."""
    return Key(key).sign(tip_body(action, *args))