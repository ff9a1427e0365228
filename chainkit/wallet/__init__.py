"""secp256k1 keys, EIP-155 transaction signing and BIP-32 derivation."""