"""
Step engine internals: polling, result checks and the dispatch loop.
"""
