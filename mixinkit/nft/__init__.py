"""NFO memo encoding and decoding for minting collectibles."""