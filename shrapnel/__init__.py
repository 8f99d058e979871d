# shrapnel
# Recursive decomposition and recomposition of nested encodings

"""
Core pipeline: a buffer is decomposed into a tree of decoded fragments,
edited in place, and recomposed by re-encoding each fragment and splicing
it back into its parent.

Modules:
    codec       - Codec contract and transform adaptation
    fragment    - Fragment tree node
    engine      - decompose / recompose
    fingerprint - Order- and path-sensitive structural hash
    flatten     - Linear projection for display and diffing
    walker      - Lock-step walk over fingerprint-equal trees
    library     - Built-in codecs (base64, hex, JSON, HTTP, gzip, ...)
"""

__version__ = "0.1.0"
