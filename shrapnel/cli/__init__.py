# CLI package for shrapnel
"""
Command-line interface over the decomposition engine.

Commands:
    shrapnel explode - Print the fragment tree
    shrapnel flatten - Print the flattened projection
    shrapnel replace - Edit every node and recompose
    shrapnel diff    - Localize differences between two buffers
"""
