# Codec library for shrapnel
"""
Built-in codecs and acceptance filters.

The engine depends only on the Codec contract; these are the codecs the
CLI uses by default, in the order given by ALL_CODECS.
"""
