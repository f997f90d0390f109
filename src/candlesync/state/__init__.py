"""State layer.

Everything that decides what the local collection looks like lives here:
the cache with its optimistic overlays, the mutation transforms, the
in-flight gate and the observer registry used for change fan-out.
"""
